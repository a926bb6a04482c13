"""Rule options: routing decisions evaluated instead of direct proxying."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .. import defaults as d
from .base import clone_section, derived, section_to_dict


@dataclass
class RuleCaseOptions:
    """One branch of a rule."""
    matches: List[str] = field(default_factory=list)
    next_route: str = ""
    req_rewriter_name: str = ""

    def clone(self) -> "RuleCaseOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class RuleOptions:
    """Inspects one request input and picks the next route from its cases."""
    next_route: str = ""
    ingress_req_rewriter_name: str = ""
    egress_req_rewriter_name: str = ""
    nomatch_req_rewriter_name: str = ""
    input_source: str = ""
    input_key: str = ""
    input_type: str = d.DEFAULT_RULE_INPUT_TYPE
    input_encoding: str = ""
    input_index: int = 0
    input_delimiter: str = d.DEFAULT_RULE_INPUT_DELIMITER
    operation: str = ""
    operation_arg: str = ""
    cases: Dict[str, RuleCaseOptions] = field(default_factory=dict)
    redirect_url: str = ""
    max_rule_executions: int = d.DEFAULT_RULE_MAX_EXECUTIONS

    name: str = derived("")

    def rewriter_names(self) -> List[str]:
        """All rewriter names this rule refers to, in declaration order."""
        names = [self.ingress_req_rewriter_name, self.egress_req_rewriter_name,
                 self.nomatch_req_rewriter_name]
        names.extend(c.req_rewriter_name for c in self.cases.values())
        return [n for n in names if n]

    def clone(self) -> "RuleOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)
