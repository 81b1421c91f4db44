import os, sys, pdb, warnings
from pathlib import Path
import unittest as test

import stddata

pkgdir = Path(stddata.__file__).parents[0]
scriptdir = Path(__file__).parents[2] / "scripts"

class TestSourceCompiles(test.TestCase):

    def compile_quietly(self, srcfile):
        with open(srcfile, encoding='utf-8') as fd:
            src = fd.read()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(src, str(srcfile), 'exec')

    def test_package(self):
        srcfiles = sorted(pkgdir.rglob("*.py"))
        self.assertIn(pkgdir / "wsgi.py", srcfiles)
        for srcfile in srcfiles:
            with self.subTest(srcfile=str(srcfile.relative_to(pkgdir))):
                self.compile_quietly(srcfile)

    def test_scripts(self):
        if not scriptdir.is_dir():
            self.skipTest("scripts directory not available")
        for srcfile in sorted(scriptdir.glob("*.py")):
            with self.subTest(srcfile=srcfile.name):
                self.compile_quietly(srcfile)


if __name__ == '__main__':
    test.main()
