import os, sys, pdb, json, logging, tempfile
from pathlib import Path
import unittest as test
from unittest import mock

import yaml, requests

from stddata import config, ConfigurationException

datadir = Path(__file__).parents[0] / "data"
tmpd = None

def setUpModule():
    global tmpd
    tmpd = tempfile.TemporaryDirectory(prefix="_test_config.")

def tearDownModule():
    tmpd.cleanup()

class MockResponse:
    def __init__(self, text, status_code, reason, ctype="text/yaml"):
        self.text = text
        self.status_code = status_code
        self.reason = reason
        self.headers = {"Content-Type": ctype}

    def json(self):
        return json.loads(self.text)

def mocked_requests_get(*args, **kwargs):
    if args[0].endswith("/conf.json"):
        return MockResponse('{"name": "goober", "load_on_start": false}', 200, "OK",
                            "application/json")
    elif args[0].endswith("/conf.yml"):
        return MockResponse("name: gurn\nproviders:\n  country: {}\n", 200, "OK")
    elif args[0].endswith("/list.yml"):
        return MockResponse("- name\n- gurn\n", 200, "OK")
    return MockResponse("Not found", 404, "Not Found")

class TestLoadConfig(test.TestCase):

    def test_load_yaml(self):
        cfg = config.load_from_file(datadir / "stddata-conf.yml")
        self.assertEqual(cfg['name'], "stddata-test")
        self.assertEqual(cfg['base_ep'], "/stddata/")
        self.assertIs(cfg['load_on_start'], True)
        self.assertEqual(list(cfg['providers'].keys()), ["country", "nations", "lang", "cities"])
        self.assertEqual(cfg['providers']['cities']['fields'], ["city", "state", "zipcode"])

    def test_load_json(self):
        cfgfile = os.path.join(tmpd.name, "conf.json")
        with open(cfgfile, 'w') as fd:
            json.dump({"name": "goob", "providers": {"country": {}}}, fd)
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg, {"name": "goob", "providers": {"country": {}}})

    def test_load_empty(self):
        cfgfile = os.path.join(tmpd.name, "empty.yml")
        with open(cfgfile, 'w') as fd:
            pass
        self.assertEqual(config.load_from_file(cfgfile), {})

    def test_load_bad(self):
        cfgfile = os.path.join(tmpd.name, "bad.json")
        with open(cfgfile, 'w') as fd:
            fd.write("{ goober }")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

        cfgfile = os.path.join(tmpd.name, "bad.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("name: [goober\n")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

        cfgfile = os.path.join(tmpd.name, "list.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("- goober\n- gurn\n")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

        with self.assertRaises(IOError):
            config.load_from_file(os.path.join(tmpd.name, "goober.yml"))

class TestResolveConfig(test.TestCase):

    def test_file(self):
        cfg = config.resolve_configuration(str(datadir / "stddata-conf.yml"))
        self.assertEqual(cfg['name'], "stddata-test")
        cfg = config.resolve_configuration("file://" + str(datadir / "stddata-conf.yml"))
        self.assertEqual(cfg['name'], "stddata-test")

        with self.assertRaises(ConfigurationException):
            config.resolve_configuration(str(datadir / "goober.yml"))
        with self.assertRaises(ConfigurationException):
            config.resolve_configuration("ftp://example.com/conf.yml")

    @mock.patch('stddata.config.requests.get', side_effect=mocked_requests_get)
    def test_url(self, mock_get):
        cfg = config.resolve_configuration("https://config.example.com/conf.json")
        self.assertEqual(cfg, {"name": "goober", "load_on_start": False})
        cfg = config.resolve_configuration("https://config.example.com/conf.yml")
        self.assertEqual(cfg, {"name": "gurn", "providers": {"country": {}}})

        with self.assertRaises(ConfigurationException):
            config.resolve_configuration("https://config.example.com/list.yml")
        with self.assertRaises(ConfigurationException):
            config.resolve_configuration("https://config.example.com/goober.yml")

class TestConfigureLog(test.TestCase):

    def setUp(self):
        self.rootlog = logging.getLogger()
        self.handlers = list(self.rootlog.handlers)
        self.level = self.rootlog.level

    def tearDown(self):
        for hdlr in self.rootlog.handlers:
            if hdlr not in self.handlers:
                self.rootlog.removeHandler(hdlr)
                hdlr.close()
        self.rootlog.setLevel(self.level)
        config.global_logdir = None
        config.global_logfile = None

    def test_configure_log(self):
        cfg = {"logdir": tmpd.name, "logfile": "test.log", "loglevel": "DEBUG"}
        config.configure_log(config=cfg)
        logfile = os.path.join(tmpd.name, "test.log")
        self.assertEqual(config.global_logdir, tmpd.name)
        self.assertEqual(config.global_logfile, logfile)

        logging.getLogger("stddata.goober").debug("Hello, world")
        for hdlr in self.rootlog.handlers:
            hdlr.flush()
        with open(logfile) as fd:
            content = fd.read()
        self.assertIn("Hello, world", content)

    def test_bad_level(self):
        with self.assertRaises(ConfigurationException):
            config.configure_log(os.path.join(tmpd.name, "bad.log"), config={"loglevel": "GOOBER"})


if __name__ == '__main__':
    test.main()
