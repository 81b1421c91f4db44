import os, sys, pdb, logging
from pathlib import Path
import unittest as test

from stddata import country, UnknownIndex, NotReady
from stddata.provider import DUMP_QUERY

datadir = Path(__file__).parents[0] / "data"

class TestCountryProvider(test.TestCase):

    def setUp(self):
        self.prov = country.CountryProvider()

    def test_ctor(self):
        self.assertEqual(self.prov.name, "country")
        self.assertEqual(self.prov.primary, "name")
        self.assertEqual(self.prov.index_names, ["name", "alpha2", "alpha3", "number"])
        self.assertEqual(self.prov.result_label, "Countries")
        self.assertIs(self.prov.entity, country.Country)
        self.assertFalse(self.prov.ready)
        with self.assertRaises(NotReady):
            self.prov.search("alpha2", "A")

    def test_load_embedded(self):
        self.assertEqual(self.prov.load(), 249)
        self.assertEqual(self.prov.record_count, 249)
        self.assertTrue(self.prov.ready)

    def test_alpha2(self):
        self.prov.load()
        out = self.prov.search("alpha2", "A")
        self.assertEqual([g[0].alpha2_code for g in out],
                         "AD AE AF AG AI AL AM AO AQ AR AS AT AU AW AX AZ".split())

        out = self.prov.search("alpha2", "af")
        self.assertEqual(out, [(country.Country("Afghanistan", "AF", "AFG", "004"),)])

        self.assertEqual(self.prov.search("alpha2", "AFG"), [])

    def test_alpha3(self):
        self.prov.load()
        out = self.prov.search("alpha3", "usa")
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0][0].english_name, "United States")

    def test_number(self):
        self.prov.load()
        out = self.prov.search("number", "84")
        self.assertEqual([g[0].numeric_code for g in out], ["840"])
        self.assertEqual(out[0][0].alpha2_code, "US")

    def test_name(self):
        self.prov.load()
        out = self.prov.search("name", "united")
        self.assertEqual([g[0].english_name for g in out],
                         ["United Arab Emirates", "United Kingdom", "United States",
                          "United States Minor Outlying Islands"])

        out = self.prov.search("name", "åland")
        self.assertEqual([g[0].alpha2_code for g in out], ["AX"])

    def test_dump(self):
        self.prov.load()
        out = self.prov.search("name", DUMP_QUERY)
        self.assertEqual(len(out), 249)
        self.assertEqual(out[0][0].english_name, "Afghanistan")
        self.assertEqual(out[-1][0].english_name, "Åland Islands")

        out = self.prov.search("alpha2", DUMP_QUERY)
        codes = [g[0].alpha2_code for g in out]
        self.assertEqual(codes, sorted(codes))

    def test_unknown_index(self):
        self.prov.load()
        with self.assertRaises(UnknownIndex):
            self.prov.search("continent", "A")

    def test_alternate_source(self):
        prov = country.CountryProvider({"source": {"file": str(datadir / "countries.txt")}})
        self.assertEqual(prov.load(), 4)
        self.assertEqual(prov.record_count, 5)

        out = prov.search("name", "Georgia")
        self.assertEqual([c.alpha2_code for c in out[0]], ["GE", "US"])


if __name__ == '__main__':
    test.main()
