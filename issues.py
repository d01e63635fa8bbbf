# issues.py
from dataclasses import dataclass

@dataclass(frozen=True)
class PrintIssue:
    name: str
    description: str
    icon: str

COMMON_ISSUES = (
    PrintIssue("Layer Shifting", "Print layers are misaligned", ":material/layers:"),
    PrintIssue("Stringing", "Thin strands between printed parts", ":material/water_drop:"),
    PrintIssue("Warping", "Corners lifting off the bed", ":material/power_off:"),
    PrintIssue("Under-extrusion", "Gaps or weak layers in print", ":material/arrow_downward:"),
    PrintIssue("Over-extrusion", "Excess material on surfaces", ":material/arrow_upward:"),
    PrintIssue("Gaps in Top Layers", "Incomplete top surface", ":material/grid_on:"),
    PrintIssue("First Layer Issues", "Poor bed adhesion", ":material/stacks:"),
    PrintIssue("Layer Adhesion", "Layers separating or weak prints", ":material/waves:"),
)

def issue_question(issue_name: str) -> str:
    return f"I'm having {issue_name.lower()}, how can I fix it?"
