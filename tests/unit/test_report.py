"""Tests for report aggregation and rendering."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from vrdiff.errors import ReportInvariantError
from vrdiff.models import Changed, Errored, Unchanged
from vrdiff.report import Report, ReportAggregator, render_json, render_shortstat, render_tsv


def _changed(path: str, pixels: int = 3) -> Changed:
    return Changed(path=path, diff_pixels=pixels, total_pixels=100, diff_image=Path("d") / path)


def _sample() -> Report:
    agg = ReportAggregator()
    agg.add_paths(["new.png"], ["old.png"])
    agg.add_outcome(_changed("b.png"))
    agg.add_outcome(Unchanged(path="a.png"))
    agg.add_outcome(Errored(path="c.png", message="cannot decode PNG image: bad"))
    return agg.freeze(3)


class TestReportAggregator:
    def test_outcomes_routed_by_kind(self) -> None:
        report = _sample()
        assert report.added == ("new.png",)
        assert report.removed == ("old.png",)
        assert [c.path for c in report.changed] == ["b.png"]
        assert report.unchanged == ("a.png",)
        assert [e.path for e in report.errored] == ["c.png"]
        assert report.common_count == 3
        assert report.has_changes
        assert report.has_errors

    def test_added_removed_keep_order(self) -> None:
        agg = ReportAggregator()
        agg.add_paths(["a", "b", "c"], ["x", "y"])
        report = agg.freeze(0)
        assert report.added == ("a", "b", "c")
        assert report.removed == ("x", "y")

    def test_empty_report(self) -> None:
        report = ReportAggregator().freeze(0)
        assert not report.has_changes
        assert not report.has_errors

    def test_count_mismatch_raises(self) -> None:
        agg = ReportAggregator()
        agg.add_outcome(Unchanged(path="a.png"))
        with pytest.raises(ReportInvariantError, match="1 outcomes recorded for 2 common paths"):
            agg.freeze(2)

    def test_closed_after_freeze(self) -> None:
        agg = ReportAggregator()
        agg.freeze(0)
        with pytest.raises(RuntimeError, match="already returned"):
            agg.add_outcome(Unchanged(path="a.png"))

    def test_unknown_outcome(self) -> None:
        with pytest.raises(TypeError):
            ReportAggregator().add_outcome("a.png")  # type: ignore[arg-type]

    def test_concurrent_appends_not_lost(self) -> None:
        agg = ReportAggregator()
        per_thread = 500

        def _push(tid: int) -> None:
            for i in range(per_thread):
                path = f"{tid}/{i}.png"
                if i % 3 == 0:
                    agg.add_outcome(_changed(path))
                elif i % 3 == 1:
                    agg.add_outcome(Unchanged(path=path))
                else:
                    agg.add_outcome(Errored(path=path, message="x"))

        threads = [threading.Thread(target=_push, args=(t,)) for t in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        report = agg.freeze(8 * per_thread)
        paths = (
            [c.path for c in report.changed]
            + list(report.unchanged)
            + [e.path for e in report.errored]
        )
        assert len(set(paths)) == 8 * per_thread


class TestRenderers:
    def test_tsv(self) -> None:
        lines = render_tsv(_sample()).splitlines()
        assert lines[0] == "STATUS\tPATH\tDIFF_PIXELS"
        assert lines[1:] == [
            "=\ta.png\t0",
            "~\tb.png\t3",
            "!\tc.png\tcannot decode PNG image: bad",
            "+\tnew.png\t",
            "-\told.png\t",
        ]

    def test_tsv_no_header(self) -> None:
        assert render_tsv(_sample(), header=False).splitlines()[0] == "=\ta.png\t0"

    def test_shortstat(self) -> None:
        assert render_shortstat(_sample()) == (
            "1 added, 1 removed, 1 changed, 1 unchanged, 1 errored"
        )

    def test_json(self) -> None:
        data = json.loads(render_json(_sample()))
        assert data["added"] == ["new.png"]
        assert data["removed"] == ["old.png"]
        assert data["unchanged"] == ["a.png"]
        assert data["changed"][0]["path"] == "b.png"
        assert data["changed"][0]["diff_pixels"] == 3
        assert data["changed"][0]["diff_ratio"] == pytest.approx(3.0)
        assert data["changed"][0]["diff_image"] == str(Path("d") / "b.png")
        assert data["errored"] == [{"path": "c.png", "message": "cannot decode PNG image: bad"}]
