import os, sys, pdb, json, logging, tempfile, csv
from io import StringIO
from pathlib import Path
import unittest as test

import yaml

from stddata import cli

datadir = Path(__file__).parents[0] / "data"
tmpd = None

def setUpModule():
    global tmpd
    tmpd = tempfile.TemporaryDirectory(prefix="_test_cli.")

def tearDownModule():
    tmpd.cleanup()

class TestCLI(test.TestCase):

    def setUp(self):
        self.out = StringIO()
        self.rootlog = logging.getLogger()
        self.handlers = list(self.rootlog.handlers)
        self.level = self.rootlog.level

        self.cfgfile = os.path.join(tmpd.name, "conf.yml")
        cfg = {
            "providers": {
                "country": {},
                "language": {"source": {"file": str(datadir / "languages.txt")}},
                "badlang": {"factory": "language",
                            "source": {"file": str(datadir / "languages-bad.txt")}}
            }
        }
        with open(self.cfgfile, 'w') as fd:
            yaml.safe_dump(cfg, fd, sort_keys=False)

    def tearDown(self):
        for hdlr in self.rootlog.handlers:
            if hdlr not in self.handlers:
                self.rootlog.removeHandler(hdlr)
                hdlr.close()
        self.rootlog.setLevel(self.level)

    def test_define_options(self):
        parser = cli.define_options("stddata")
        opts = parser.parse_args("country alpha2".split())
        self.assertEqual(opts.dataset, "country")
        self.assertEqual(opts.index, "alpha2")
        self.assertEqual(opts.query, "_dump")
        self.assertEqual(opts.format, "json")
        self.assertFalse(opts.list)
        self.assertIsNone(opts.cfgfile)

        opts = parser.parse_args("-q -f csv -c conf.yml language name Eng".split())
        self.assertEqual(opts.query, "Eng")
        self.assertEqual(opts.format, "csv")
        self.assertEqual(opts.cfgfile, "conf.yml")
        self.assertTrue(opts.quiet)

    def test_search_json(self):
        cli.main("stddata", "-q country alpha2 A".split(), self.out)
        out = json.loads(self.out.getvalue())
        self.assertEqual([g[0]['alpha2_code'] for g in out['Countries']][:3], ["AD", "AE", "AF"])
        self.assertEqual(len(out['Countries']), 16)

    def test_search_csv(self):
        cli.main("stddata", ["-q", "-c", self.cfgfile, "-f", "csv", "language", "name", "eng"],
                 self.out)
        rows = list(csv.reader(StringIO(self.out.getvalue())))
        self.assertEqual(rows[0], ["alpha3_bibliographic", "alpha3_terminologic", "alpha2",
                                   "english_name", "french_name"])
        self.assertEqual([r[0] for r in rows[1:]], ["eng", "enm"])

    def test_search_text(self):
        cli.main("stddata", "-q -f text country alpha3 AL".split(), self.out)
        self.assertEqual(self.out.getvalue(),
                         "Åland Islands\tAX\tALA\t248\nAlbania\tAL\tALB\t008\n")

    def test_dump(self):
        cli.main("stddata", ["-q", "-c", self.cfgfile, "-f", "text", "language", "alpha"], self.out)
        lines = self.out.getvalue().splitlines()
        self.assertEqual(len(lines), 8)
        self.assertTrue(lines[0].startswith("aar\t"))

    def test_list(self):
        cli.main("stddata", ["-q", "-c", self.cfgfile, "--list"], self.out)
        self.assertEqual(self.out.getvalue().splitlines(),
                         ["country: name alpha2 alpha3 number",
                          "language: alpha name",
                          "badlang: alpha name"])

    def test_logfile(self):
        logfile = os.path.join(tmpd.name, "cli.log")
        cli.main("stddata", ["-q", "-l", logfile, "country", "name", "Alb"], self.out)
        with open(logfile) as fd:
            self.assertIn("Loaded 249 country records", fd.read())

    def test_failures(self):
        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "country"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)

        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "goober", "name"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)
        self.assertIn("goober", str(cm.exception))

        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "country", "continent", "A"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)
        self.assertIn("No index on continent", str(cm.exception))

        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "-c", self.cfgfile, "badlang", "alpha", "a"], self.out)
        self.assertEqual(cm.exception.exitcode, 2)

        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "-c", os.path.join(tmpd.name, "goober.yml"),
                                 "country", "name"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)

        self.assertEqual(self.out.getvalue(), "")

    def test_bad_config(self):
        cfgfile = os.path.join(tmpd.name, "bad.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("providers:\n  goober: {}\n")
        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "-c", cfgfile, "goober", "name"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)

        with open(cfgfile, 'w') as fd:
            fd.write("providers: [goober\n")
        with self.assertRaises(cli.Failure) as cm:
            cli.main("stddata", ["-q", "-c", cfgfile, "goober", "name"], self.out)
        self.assertEqual(cm.exception.exitcode, 3)


if __name__ == '__main__':
    test.main()
