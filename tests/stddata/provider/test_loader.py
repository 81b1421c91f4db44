import os, sys, pdb, logging, tempfile
from collections import namedtuple
from pathlib import Path
import unittest as test
from unittest import mock

import requests

from stddata.provider import loader
from stddata import SourceUnavailable, ConfigurationException

datadir = Path(__file__).parents[1] / "data"
tmpdir = tempfile.TemporaryDirectory(prefix="_test_loader.")
loghdlr = None
rootlog = None
def setUpModule():
    global loghdlr
    global rootlog
    rootlog = logging.getLogger()
    rootlog.setLevel(logging.DEBUG)
    loghdlr = logging.FileHandler(os.path.join(tmpdir.name,"test_loader.log"))
    loghdlr.setLevel(logging.DEBUG)
    loghdlr.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    rootlog.addHandler(loghdlr)

def tearDownModule():
    global loghdlr
    if loghdlr:
        if rootlog:
            rootlog.removeHandler(loghdlr)
            loghdlr.flush()
            loghdlr.close()
        loghdlr = None
    tmpdir.cleanup()

Language = namedtuple("Language",
                      "alpha3_bibliographic alpha3_terminologic alpha2 english_name french_name")

langfile = datadir / "languages.txt"
with open(langfile, 'rb') as fd:
    langdata = fd.read()

class MockResponse:
    def __init__(self, content, status_code, reason):
        self.content = content
        self.status_code = status_code
        self.reason = reason

def mocked_requests_get(*args, **kwargs):
    if args[0].endswith("/languages.txt"):
        return MockResponse(langdata, 200, "OK")
    elif args[0].endswith("/latin1.txt"):
        return MockResponse("fre|fra|fr|French|français\n".encode('latin-1'), 200, "OK")
    elif args[0].endswith("/down.txt"):
        raise requests.ConnectionError("Connection refused")
    return MockResponse(b"Not found", 404, "Not Found")

class TestSources(test.TestCase):

    def test_text(self):
        src = loader.TextSource("a\tb\n", "goob")
        self.assertEqual(src.name, "goob")
        self.assertEqual(str(src), "goob")
        with src.open() as fd:
            self.assertEqual(fd.read(), "a\tb\n")

    def test_file(self):
        src = loader.FileSource(langfile)
        self.assertEqual(src.name, str(langfile))
        with src.open() as fd:
            line = fd.readline()
        self.assertEqual(line, "aar||aa|Afar|afar\n")    # no BOM

    def test_file_missing(self):
        src = loader.FileSource(datadir / "goober.txt")
        with self.assertRaises(SourceUnavailable) as cm:
            src.open()
        self.assertEqual(cm.exception.source, str(datadir / "goober.txt"))
        self.assertEqual(cm.exception.code, 503)
        self.assertTrue(isinstance(cm.exception.__cause__, OSError))

    @mock.patch('stddata.provider.loader.requests.get', side_effect=mocked_requests_get)
    def test_url(self, mock_get):
        src = loader.URLSource("https://example.com/data/languages.txt", 5)
        with src.open() as fd:
            line = fd.readline()
        self.assertEqual(line, "aar||aa|Afar|afar\n")
        mock_get.assert_called_once_with("https://example.com/data/languages.txt", timeout=5)

    @mock.patch('stddata.provider.loader.requests.get', side_effect=mocked_requests_get)
    def test_url_encoding(self, mock_get):
        src = loader.URLSource("https://example.com/data/latin1.txt")
        with self.assertRaises(SourceUnavailable):
            src.open()

        src = loader.URLSource("https://example.com/data/latin1.txt", encoding="latin-1")
        with src.open() as fd:
            self.assertIn("français", fd.read())

    @mock.patch('stddata.provider.loader.requests.get', side_effect=mocked_requests_get)
    def test_url_notfound(self, mock_get):
        src = loader.URLSource("https://example.com/data/goober.txt")
        with self.assertRaises(SourceUnavailable) as cm:
            src.open()
        self.assertIn("404 Not Found", cm.exception.message)
        self.assertIn("https://example.com/data/goober.txt", cm.exception.message)

    @mock.patch('stddata.provider.loader.requests.get', side_effect=mocked_requests_get)
    def test_url_down(self, mock_get):
        src = loader.URLSource("https://example.com/data/down.txt")
        with self.assertRaises(SourceUnavailable) as cm:
            src.open()
        self.assertIn("Connection refused", cm.exception.message)
        self.assertTrue(isinstance(cm.exception.__cause__, requests.ConnectionError))

class TestMakeSource(test.TestCase):

    def test_file(self):
        src = loader.make_source({"file": str(langfile), "url": "https://example.com/"})
        self.assertTrue(isinstance(src, loader.FileSource))
        self.assertEqual(src.encoding, loader.DEF_ENCODING)

    def test_url(self):
        src = loader.make_source({"url": "https://example.com/lang.txt", "timeout": "2.5",
                                  "encoding": "latin-1"})
        self.assertTrue(isinstance(src, loader.URLSource))
        self.assertEqual(src.url, "https://example.com/lang.txt")
        self.assertEqual(src.timeout, 2.5)
        self.assertEqual(src.encoding, "latin-1")

    def test_default_url(self):
        src = loader.make_source({}, "https://example.com/lang.txt")
        self.assertEqual(src.url, "https://example.com/lang.txt")
        self.assertEqual(src.timeout, loader.DEF_TIMEOUT)
        src = loader.make_source(None, "https://example.com/lang.txt")
        self.assertEqual(src.url, "https://example.com/lang.txt")

    def test_bad_config(self):
        with self.assertRaises(ConfigurationException):
            loader.make_source({})
        with self.assertRaises(ConfigurationException):
            loader.make_source("https://example.com/lang.txt")
        with self.assertRaises(ConfigurationException):
            loader.make_source({"url": "https://example.com/lang.txt", "timeout": "soon"})

class TestRecordLoader(test.TestCase):

    def test_ctor(self):
        ldr = loader.RecordLoader(loader.FileSource(langfile), 5, '|', Language)
        self.assertEqual(ldr.nfields, 5)
        self.assertEqual(ldr.delimiter, '|')
        self.assertIs(ldr.log, loader.deflog)

        with self.assertRaises(ConfigurationException):
            loader.RecordLoader(loader.FileSource(langfile), 5, '||')
        with self.assertRaises(ConfigurationException):
            loader.RecordLoader(loader.FileSource(langfile), 0, '|')

    def test_records(self):
        ldr = loader.RecordLoader(loader.FileSource(langfile), 5, '|')
        recs = list(ldr.records())
        self.assertEqual(len(recs), 8)     # blank line skipped
        self.assertEqual(recs[0], ["aar", "", "aa", "Afar", "afar"])
        self.assertEqual(recs[6], ["fre", "fra", "fr", "French", "français"])
        self.assertEqual(recs[7][0], "qaa-qtz")

    def test_entities(self):
        ldr = loader.RecordLoader(loader.FileSource(langfile), 5, '|', Language)
        ents = list(ldr.entities())
        self.assertEqual(len(ents), 8)
        self.assertEqual(ents[3], Language("ger", "deu", "de", "German", "allemand"))
        self.assertEqual(ents[5].english_name, "English, Middle (1100-1500)")

        ldr = loader.RecordLoader(loader.FileSource(langfile), 5, '|')
        self.assertEqual(next(ldr.entities()), ("aar", "", "aa", "Afar", "afar"))

    def test_strip(self):
        src = loader.TextSource("  Albania\t AL \tALB\t008  \n\nAfghanistan\tAF\tAFG\t004\n")
        ldr = loader.RecordLoader(src, 4)
        self.assertEqual(list(ldr.records()), [["Albania", "AL", "ALB", "008"],
                                               ["Afghanistan", "AF", "AFG", "004"]])

    def test_quotes_literal(self):
        src = loader.TextSource('"Goob"\tGB\tGOB\t999\n')
        ldr = loader.RecordLoader(src, 4)
        self.assertEqual(list(ldr.records()), [['"Goob"', "GB", "GOB", "999"]])

    def test_wrong_field_count(self):
        ldr = loader.RecordLoader(loader.FileSource(datadir / "languages-bad.txt"), 5, '|')
        with self.assertRaises(SourceUnavailable) as cm:
            list(ldr.records())
        self.assertIn("line 2", cm.exception.message)
        self.assertIn("wrong number of fields (4; expected 5)", cm.exception.message)

    def test_missing_file(self):
        ldr = loader.RecordLoader(loader.FileSource(datadir / "goober.txt"), 5, '|')
        with self.assertRaises(SourceUnavailable):
            list(ldr.entities())


if __name__ == '__main__':
    test.main()
