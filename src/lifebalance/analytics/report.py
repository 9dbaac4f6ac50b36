"""CSV and Markdown renderers for an AnalyticsSummary."""

from lifebalance.analytics.summary import AnalyticsSummary
from lifebalance.numeric import format_number

MISSING = "—"


def to_csv(summary: AnalyticsSummary) -> str:
    """Render descriptives, a blank line, then correlations.

    Example:
        section,key,n,mean,sd,min,max
        descriptive,lbi,14,63.5,8.12,48,79
        ...

        a,b,n,r
        lbi,recovery,14,0.812
    """
    lines = ["section,key,n,mean,sd,min,max"]
    for key, d in summary.descriptives.items():
        values = [d.mean, d.sd, d.min, d.max]
        lines.append(
            ",".join(["descriptive", key, str(d.n)] + [format_number(v) for v in values])
        )

    lines.append("")
    lines.append("a,b,n,r")
    for row in summary.correlations:
        lines.append(f"{row.a},{row.b},{row.n},{format_number(row.r)}")

    return "\n".join(lines)


def to_markdown(summary: AnalyticsSummary) -> str:
    """Render the summary as a Markdown report; missing values show as "—"."""

    def fmt(value: float | None) -> str:
        return format_number(value, missing=MISSING)

    md = [
        f"# Analytics summary (last {summary.window_days} days)",
        f"Generated: {summary.generated_at.isoformat()}",
        "",
        f"- Days total: {summary.n_days_total}",
        f"- Days with LBI: {summary.n_days_with_lbi}",
        f"- Days with wearable: {summary.n_days_with_wearable}",
        f"- Days with check-ins: {summary.n_days_with_check_in}",
        "",
        "## Descriptives",
        "| Metric | n | mean | sd | min | max |",
        "|---|---:|---:|---:|---:|---:|",
    ]
    for key, d in summary.descriptives.items():
        md.append(
            f"| {key} | {d.n} | {fmt(d.mean)} | {fmt(d.sd)} | {fmt(d.min)} | {fmt(d.max)} |"
        )

    md.append("")
    md.append("## Highlights")
    md.extend(f"- {h}" for h in summary.highlights)

    md.append("")
    md.append("## Correlations")
    md.append("| A | B | n | r |")
    md.append("|---|---|---:|---:|")
    for row in summary.correlations:
        md.append(f"| {row.a} | {row.b} | {row.n} | {fmt(row.r)} |")

    md.append("")
    return "\n".join(md)
