"""
Reclaim Report Templates
========================
Renders a RunReport for humans (CLI / Telegram) or machines (JSON).

Usage:
    from rent_reclaimer.modules.reclaimer.reporting import ReportTemplates

    print(ReportTemplates.json(report))
    await ctx.reply(ReportTemplates.summary(owner, report))
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict

from rent_reclaimer.modules.reclaimer.models import RunReport

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


class ReportTemplates:
    """Formatters for reclaim run reports."""

    @staticmethod
    def as_payload(report: RunReport) -> Dict[str, Any]:
        """Timestamped dict form for automation."""
        ts = datetime.fromtimestamp(report.started_at, tz=timezone.utc).isoformat()
        return {"ts": ts, **report.to_dict()}

    @staticmethod
    def json(report: RunReport) -> str:
        return json.dumps(ReportTemplates.as_payload(report), indent=2)

    @staticmethod
    def skip_line(report: RunReport) -> str:
        c = report.skip_counters
        return (
            f"Skipped: non-empty={c.non_empty}, wrong-auth={c.wrong_authority}, "
            f"below-min-rent={c.below_min_value}, not-allowed-mint={c.disallowed_mint}, "
            f"parse-errors={c.parse_error}"
        )

    @staticmethod
    def summary(owner: str, report: RunReport) -> str:
        """Plain-text summary with SOL conversion and the top candidates."""
        total_sol = lamports_to_sol(report.reclaimable_lamports)
        top_sol = lamports_to_sol(report.top_lamports)

        lines = [
            f"Owner: {owner}",
            f"Scanned: {report.scanned}",
            f"Reclaimable: {report.candidates}",
            f"Estimated rent: {total_sol:.6f} SOL (top: {top_sol:.6f} SOL)",
            ReportTemplates.skip_line(report),
        ]

        if report.top_candidates:
            lines.append("")
            lines.append("Top candidates:")
            for c in report.top_candidates:
                lines.append(f"- {c.account} | mint {c.mint} | lamports {c.reclaimable_lamports}")

        return "\n".join(lines)

    @staticmethod
    def run_result(report: RunReport) -> str:
        """One-paragraph outcome of a live or dry run."""
        mode = "DRY RUN" if report.dry_run else "LIVE"
        lines = [f"[{mode}] planned={report.planned} closed={report.closed}"]
        for sig in report.signatures:
            lines.append(f"  sig {sig}")
        if report.aborted_error:
            lines.append(f"  aborted: {report.aborted_error}")
        return "\n".join(lines)
