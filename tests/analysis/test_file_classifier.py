import unittest

from pr_automation.analysis.categories import ALL_CATEGORIES, OTHER
from pr_automation.analysis.file_classifier import analyze, classify, classify_detailed
from pr_automation.analysis.models import CodeAnalysis, FileChange, RiskLevel


class TestClassify(unittest.TestCase):
    def test_presence_in_table_order(self) -> None:
        files = ["deploy.sh", "README.md", "src/app.py", "web/index.tsx"]
        self.assertEqual(classify(files), ["Frontend", "Backend", "Documentation", "Scripts"])

    def test_test_file_counts_for_every_matching_category(self) -> None:
        self.assertEqual(classify(["src/app.test.js"]), ["Frontend", "Tests"])

    def test_unrecognized_extension_contributes_nothing(self) -> None:
        self.assertEqual(classify(["Makefile", "logo.png"]), [])
        self.assertEqual(classify([]), [])

    def test_case_insensitive(self) -> None:
        self.assertEqual(classify(["SETUP.PY", "Config.YML"]), ["Backend", "Configuration"])

    def test_never_reports_other(self) -> None:
        self.assertNotIn(OTHER, classify(["a.js", "b", "c.bin"]))


class TestClassifyDetailed(unittest.TestCase):
    def test_first_match_wins(self) -> None:
        buckets = classify_detailed(["a.js", "b.md", "c.test.js", "d.spec.rb.snap"])
        self.assertEqual(buckets["Frontend"], ["a.js", "c.test.js"])
        self.assertEqual(buckets["Documentation"], ["b.md"])
        # no known extension at the end, but the .spec. marker still matches
        self.assertEqual(buckets["Tests"], ["d.spec.rb.snap"])

    def test_is_a_partition(self) -> None:
        files = ["a.js", "b.py", "c.test.ts", "d.md", "e.json", "f.sh", "g", "h.lock", "i.yaml"]
        buckets = classify_detailed(files)
        self.assertEqual(list(buckets), list(ALL_CATEGORIES))
        flattened = [path for paths in buckets.values() for path in paths]
        self.assertEqual(sorted(flattened), sorted(files))
        self.assertEqual(sum(len(paths) for paths in buckets.values()), len(files))
        self.assertEqual(buckets[OTHER], ["g", "h.lock"])

    def test_preserves_input_order(self) -> None:
        buckets = classify_detailed(["z.py", "a.py", "m.py"])
        self.assertEqual(buckets["Backend"], ["z.py", "a.py", "m.py"])


class TestAnalyze(unittest.TestCase):
    def test_empty_input_defaults(self) -> None:
        self.assertEqual(
            analyze([]),
            CodeAnalysis(file_count=0, has_tests=False, has_documentation=False, risk_level=RiskLevel.LOW),
        )

    def test_small_change_is_low_risk(self) -> None:
        result = analyze([FileChange("a.js", 50)])
        self.assertEqual(result.risk_level, RiskLevel.LOW)
        self.assertFalse(result.has_tests)
        self.assertEqual(result.file_count, 1)

    def test_large_single_file_is_high_risk(self) -> None:
        result = analyze([FileChange("a.test.js", 150)])
        self.assertEqual(result.risk_level, RiskLevel.HIGH)
        self.assertTrue(result.has_tests)

    def test_threshold_is_exclusive_and_not_summed(self) -> None:
        files = [FileChange("a.py", 100), FileChange("b.py", 100), FileChange("c.py", 100)]
        self.assertEqual(analyze(files).risk_level, RiskLevel.LOW)

    def test_high_risk_sticks(self) -> None:
        files = [FileChange("a.py", 500), FileChange("b.py", 1)]
        self.assertEqual(analyze(files).risk_level, RiskLevel.HIGH)

    def test_substring_signals_are_case_sensitive(self) -> None:
        result = analyze([FileChange("TESTS/Readme.MD"), FileChange("lib/Spec.py")])
        self.assertFalse(result.has_tests)
        self.assertFalse(result.has_documentation)

        result = analyze([FileChange("docs/guide.rst"), FileChange("src/contest.py")])
        self.assertTrue(result.has_documentation)
        self.assertTrue(result.has_tests)

    def test_missing_change_count_counts_as_zero(self) -> None:
        result = analyze([FileChange("README")])
        self.assertEqual(result.risk_level, RiskLevel.LOW)
        self.assertTrue(result.has_documentation)

    def test_risk_level_serializes_as_string(self) -> None:
        self.assertEqual(RiskLevel.HIGH.value, "high")
        self.assertEqual(RiskLevel.LOW, "low")


if __name__ == "__main__":
    unittest.main()
