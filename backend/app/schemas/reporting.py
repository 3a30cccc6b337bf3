from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.schemas.employee import CamelModel, Employee


@dataclass
class ReportingTree:
    """
    An employee's reporting subtree as loaded from the store.

    nodes maps every loaded employee id to its record; children maps a
    manager id to the ordered ids of its loaded direct reports. Employees at
    the deepest loaded level have no entry in children.
    """
    root_id: str
    nodes: Dict[str, Employee] = field(default_factory=dict)
    children: Dict[str, List[str]] = field(default_factory=dict)

    def add_edge(self, manager_id: str, report: Employee) -> bool:
        """Record manager -> report. Returns True if the report is new to the tree."""
        self.children.setdefault(manager_id, []).append(report.employee_id)
        if report.employee_id in self.nodes:
            return False
        self.nodes[report.employee_id] = report
        return True


class ReportingNode(CamelModel):
    employee_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    direct_reports: List["ReportingNode"] = []


class ReportingStructure(CamelModel):
    employee: ReportingNode
    number_of_reports: int


ReportingNode.model_rebuild()
