from __future__ import annotations

import unittest
from dataclasses import replace

from gplanner.summary import due_soon, project_summaries, share_text, suggest_project_tag, task_stats

from _fixtures import TODAY, make_task


class TestSummaryContract(unittest.TestCase):
    def test_share_text_empty(self) -> None:
        self.assertEqual(share_text([]), "No tasks in gPlanner yet.")

    def test_share_text_lines(self) -> None:
        a = replace(make_task("a", 31, project="Thesis", color="#112233"), project_tag="uni")
        b = make_task("b", 3, finished_at="2024-01-03T12:00:00Z")
        text = share_text([a, b])
        lines = text.splitlines()
        self.assertEqual(lines[0], "gPlanner schedule")
        # sorted by deadline: b (3 days) first
        self.assertEqual(lines[2], "★★★★ (1–7 days) – 3d (3 days left)")
        self.assertIn("  Finished: 01/03/2024", lines)
        self.assertIn("★★ (1–12 months) – 1m (31 days left)", lines)
        self.assertIn("  Project: Thesis", lines)
        self.assertIn("  Project color: #112233", lines)
        self.assertIn("  Tag: uni", lines)
        self.assertIn("  Deadline: 02/01/2024", lines)

    def test_stats(self) -> None:
        tasks = [make_task("a", 3), make_task("b", 10), make_task("c", 3, finished_at="2024-01-01T00:00:00Z")]
        st = task_stats(tasks)
        self.assertEqual((st.total, st.active, st.completed), (3, 2, 1))
        self.assertEqual(st.per_region, {4: 1, 3: 1, 2: 0, 1: 0})
        self.assertAlmostEqual(st.completion_rate, 1 / 3)
        self.assertEqual(task_stats([]).completion_rate, 0.0)

    def test_due_soon(self) -> None:
        tasks = [make_task("far", 40), make_task("soon", 6), make_task("now", 1), make_task("x", 2, finished_at="y")]
        self.assertEqual([t.id for t in due_soon(tasks, TODAY)], ["now", "soon"])

    def test_project_summaries_and_tag_suggestion(self) -> None:
        tasks = [
            make_task("1", 20, project="Beta"),
            replace(make_task("2", 5, project="Beta"), project_tag="b"),
            make_task("3", 4),
        ]
        groups = project_summaries(tasks)
        self.assertEqual([g.project for g in groups], ["(no project)", "Beta"])
        beta = groups[1]
        self.assertEqual(beta.tag, "b")
        self.assertEqual([t.id for t in beta.tasks], ["2", "1"])
        self.assertEqual(beta.active, 2)
        self.assertEqual(suggest_project_tag(tasks, " beta "), "b")
        self.assertIsNone(suggest_project_tag(tasks, "gamma"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
