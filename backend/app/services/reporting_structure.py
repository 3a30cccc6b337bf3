"""
Report counting and subtree shaping over a loaded ReportingTree.
"""
from typing import Optional, Set

from app.schemas.reporting import ReportingNode, ReportingTree


def count_reports(tree: ReportingTree, employee_id: str, path: Optional[Set[str]] = None) -> int:
    """
    Total direct and indirect reports of `employee_id` within the loaded tree.

    len(direct reports) + the count of each direct report. An employee with
    two managers is counted under each of them. `path` holds the managers
    above the current employee; an edge back into it closes a cycle and is
    skipped.
    """
    if path is None:
        path = set()

    path.add(employee_id)
    total = 0
    for report_id in tree.children.get(employee_id, []):
        if report_id in path:
            continue
        total += 1 + count_reports(tree, report_id, path)
    path.discard(employee_id)
    return total


def build_node(tree: ReportingTree, employee_id: str, path: Optional[Set[str]] = None) -> ReportingNode:
    """Nest the loaded subtree under `employee_id`. Shared reports appear under every manager."""
    if path is None:
        path = set()

    path.add(employee_id)
    employee = tree.nodes[employee_id]
    reports = [
        build_node(tree, report_id, path)
        for report_id in tree.children.get(employee_id, [])
        if report_id not in path
    ]
    path.discard(employee_id)

    return ReportingNode(
        employee_id=employee.employee_id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        position=employee.position,
        department=employee.department,
        direct_reports=reports,
    )
