import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.taxonomy import extract_claimed_skills  # noqa: E402
from app.taxonomy.local_taxonomy import LocalTaxonomy  # noqa: E402


class TaxonomyTests(unittest.TestCase):
    def test_synonyms_resolve_to_catalog_names(self):
        taxonomy = LocalTaxonomy()
        claimed = taxonomy.claimed_skills("Shipped services on Postgres with docker-compose and NextJS.")
        self.assertEqual(claimed, ["Next.js", "Docker", "PostgreSQL"])

    def test_claims_are_catalog_subset_without_duplicates(self):
        taxonomy = LocalTaxonomy()
        text = "React react REACT reactjs, React Native, node js, NodeJS, AWS aws"
        claimed = taxonomy.claimed_skills(text)
        self.assertEqual(len(claimed), len(set(claimed)))
        self.assertTrue(set(claimed).issubset(set(taxonomy.skills)))
        self.assertIn("React", claimed)
        self.assertIn("React Native", claimed)
        self.assertIn("Node.js", claimed)

    def test_substring_match_has_no_word_boundaries(self):
        claimed = extract_claimed_skills("Five years of JavaScript")
        self.assertIn("JavaScript", claimed)
        self.assertIn("Java", claimed)

    def test_empty_text_claims_nothing(self):
        self.assertEqual(extract_claimed_skills(""), [])
        self.assertEqual(extract_claimed_skills("   \n"), [])

    def test_matching_is_idempotent_and_order_independent(self):
        taxonomy = LocalTaxonomy()
        first = taxonomy.claimed_skills("Docker and Express")
        second = taxonomy.claimed_skills("Express and Docker")
        self.assertEqual(first, second)
        self.assertEqual(first, taxonomy.claimed_skills("Docker and Express"))


if __name__ == "__main__":
    unittest.main()
