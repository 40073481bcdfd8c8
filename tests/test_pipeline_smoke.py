import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

import app.main  # noqa: F401, E402
from app.evidence.rules import RULES  # noqa: E402
from app.taxonomy import get_default_taxonomy_provider  # noqa: E402


class PipelineSmokeTests(unittest.TestCase):
    def test_every_catalog_skill_has_a_rule(self):
        skills = get_default_taxonomy_provider().skills
        self.assertEqual(len(skills), 27)
        self.assertEqual(set(skills), set(RULES))


if __name__ == "__main__":
    unittest.main()
