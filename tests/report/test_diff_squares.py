import unittest

from lines_changed.report.diff_squares import generate_diff_squares, round_half_up


class TestDiffSquares(unittest.TestCase):
    def test_square_cases(self) -> None:
        cases = [
            (100, 0, "🟩🟩🟩🟩🟩"),
            (0, 100, "🟥🟥🟥🟥🟥"),
            (342, 128, "🟩🟩🟩🟩🟥"),
            (100, 100, "🟩🟩🟩🟥🟥"),
            (0, 0, "▫▫▫▫▫"),
            (20, 80, "🟩🟥🟥🟥🟥"),
            (80, 20, "🟩🟩🟩🟩🟥"),
            (1, 9, "🟩🟥🟥🟥🟥"),
            (1, 99, "🟥🟥🟥🟥🟥"),
        ]
        for additions, deletions, expected in cases:
            with self.subTest(additions=additions, deletions=deletions):
                self.assertEqual(generate_diff_squares(additions, deletions), expected)

    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.4999), 2)
        self.assertEqual(round_half_up(0), 0)


if __name__ == "__main__":
    unittest.main()
