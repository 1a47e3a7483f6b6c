"""
Meeting ROI Calculator
Core calculation engine for board meeting cost estimates
"""

import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Union

RawValue = Union[str, int, float, None]

_INT_PREFIX = re.compile(r'^\s*([+-]?)([0-9]+)')

# Matches CPython's default int_max_str_digits
MAX_DIGITS = 4300


def parse_int(raw: RawValue) -> Optional[int]:
    """
    Read the leading integer of a raw field value

    Returns None when no integer can be read ("", "abc", None).
    Fractional input is truncated: "12.7" -> 12, 12.7 -> 12.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw != raw or raw in (float('inf'), float('-inf')):
            return None
        return int(raw)
    match = _INT_PREFIX.match(str(raw))
    if not match:
        return None
    sign, digits = match.groups()
    if len(digits) > MAX_DIGITS:
        return None
    try:
        return int(sign + digits)
    except ValueError:
        # Interpreter limit lowered below MAX_DIGITS
        return None


@dataclass
class MeetingInputs:
    admins: int = 2
    directors: int = 10
    avg_annual_survey: int = 150000  # average annual salary of directors
    meetings_per_year: int = 24
    saas_monthly: Optional[int] = None

    # JSON / form field names
    FIELD_NAMES = {
        'admins': 'admins',
        'directors': 'directors',
        'avgAnnualSurvey': 'avg_annual_survey',
        'meetingsPerYear': 'meetings_per_year',
        'saasMonthly': 'saas_monthly',
    }

    def to_dict(self) -> Dict:
        data = {
            'admins': self.admins,
            'directors': self.directors,
            'avgAnnualSurvey': self.avg_annual_survey,
            'meetingsPerYear': self.meetings_per_year,
        }
        if self.saas_monthly is not None:
            data['saasMonthly'] = self.saas_monthly
        return data


@dataclass
class CalculationResult:
    total_admin_cost: float
    total_director_cost: float
    total_meeting_cost: float
    total_annual_cost: float
    saas_annual_cost: Optional[float] = None
    savings: Optional[float] = None

    def to_dict(self) -> Dict:
        """camelCase view; absent premium fields are omitted"""
        data = {
            'totalAdminCost': self.total_admin_cost,
            'totalDirectorCost': self.total_director_cost,
            'totalMeetingCost': self.total_meeting_cost,
            'totalAnnualCost': self.total_annual_cost,
        }
        if self.saas_annual_cost is not None:
            data['saasAnnualCost'] = self.saas_annual_cost
        if self.savings is not None:
            data['savings'] = self.savings
        return data

    def formatted(self) -> Dict[str, str]:
        return {key: format_currency(value) for key, value in self.to_dict().items()}


class ROICalculator:
    """Annual meeting cost and SaaS savings calculations"""

    # Fixed business parameters
    COST_FRACTION = 0.15   # ~15% of avg salary (per hundred) per meeting
    ADMIN_HOURS = 4        # 4 hours per meeting
    DIRECTOR_HOURS = 2     # 2 hours per meeting
    MONTHS_PER_YEAR = 12

    # Safe minimums substituted for missing or invalid field values
    FIELD_MINIMUMS = {
        'admins': 1,
        'directors': 1,
        'avg_annual_survey': 0,
        'meetings_per_year': 1,
        'saas_monthly': 0,
    }

    def coerce_field(self, field: str, raw: RawValue) -> int:
        """
        Coerce one raw field value to an integer

        Invalid, missing and zero values fall back to the field's minimum.
        Negative values are passed through unvalidated.
        """
        if field not in self.FIELD_MINIMUMS:
            raise KeyError(f"Unknown input field: {field}")
        value = parse_int(raw)
        return value or self.FIELD_MINIMUMS[field]

    def coerce_inputs(self, data: Optional[Dict], base: Optional[MeetingInputs] = None) -> MeetingInputs:
        """
        Build MeetingInputs from a JSON or form mapping

        Fields absent from the mapping keep their value from `base`
        (the session defaults when no base is given).
        """
        inputs = base if base is not None else MeetingInputs()
        values = asdict(inputs)
        for key, attr in MeetingInputs.FIELD_NAMES.items():
            if data and key in data:
                values[attr] = self.coerce_field(attr, data[key])
        return MeetingInputs(**values)

    def cost_per_meeting(self, avg_annual_survey: float) -> float:
        return (avg_annual_survey / 100) * self.COST_FRACTION

    def calculate(self, inputs: MeetingInputs, unlocked: bool = False) -> CalculationResult:
        """
        Calculate annual meeting costs

        The savings comparison is only produced when access is unlocked and
        a monthly SaaS cost has been entered.
        """
        cost_per_meeting = self.cost_per_meeting(inputs.avg_annual_survey)
        admin_cost = inputs.admins * inputs.meetings_per_year * cost_per_meeting * self.ADMIN_HOURS
        director_cost = inputs.directors * inputs.meetings_per_year * cost_per_meeting * self.DIRECTOR_HOURS

        result = CalculationResult(
            total_admin_cost=admin_cost,
            total_director_cost=director_cost,
            total_meeting_cost=admin_cost + director_cost,
            total_annual_cost=admin_cost + director_cost,
        )

        # An entered cost of 0 counts as not entered
        if unlocked and inputs.saas_monthly:
            result.saas_annual_cost = inputs.saas_monthly * self.MONTHS_PER_YEAR
            result.savings = result.total_annual_cost - result.saas_annual_cost

        return result

    def summary_rows(self, inputs: MeetingInputs, result: CalculationResult) -> List[Dict]:
        """Metric/value rows describing one calculation, for export"""
        rows = [
            {'Metric': 'Number of Admins', 'Value': inputs.admins},
            {'Metric': 'Number of Directors', 'Value': inputs.directors},
            {'Metric': 'Avg Annual Salary of Directors', 'Value': inputs.avg_annual_survey},
            {'Metric': 'Meetings Per Year', 'Value': inputs.meetings_per_year},
            {'Metric': 'Cost Per Meeting', 'Value': self.cost_per_meeting(inputs.avg_annual_survey)},
            {'Metric': 'Admin Time Cost', 'Value': result.total_admin_cost},
            {'Metric': 'Director Time Cost', 'Value': result.total_director_cost},
            {'Metric': 'Total Meeting Cost', 'Value': result.total_meeting_cost},
            {'Metric': 'Total Annual Cost', 'Value': result.total_annual_cost},
        ]
        if result.savings is not None:
            rows.extend([
                {'Metric': 'Monthly SaaS Cost', 'Value': inputs.saas_monthly},
                {'Metric': 'Annual SaaS Cost', 'Value': result.saas_annual_cost},
                {'Metric': 'Annual Savings', 'Value': result.savings},
            ])
        return rows


def format_currency(value: float) -> str:
    """Format value as whole US dollars"""
    if value < 0:
        return f"-${-value:,.0f}"
    return f"${value:,.0f}"
