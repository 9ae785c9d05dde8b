"""
Facet Model

Fixed facet domains of the elderly-care market dataset and the closed set of
facet identifiers used by filters and pivots.
"""

from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Dict, Optional, Tuple


# =============================================================================
# DOMAINS
# =============================================================================

BASE_YEAR = 2021
YEAR_COUNT = 15

YEARS: Tuple[int, ...] = tuple(BASE_YEAR + i for i in range(YEAR_COUNT))

REGION = "Europe"

COUNTRIES: Tuple[str, ...] = (
    "U.K.",
    "Germany",
    "France",
    "Italy",
    "Spain",
    "Russia",
    "Rest of Europe",
)

TYPES: Tuple[str, ...] = (
    "Independent Living",
    "Assisted Living",
    "Nursing Homes",
    "Continuing Care Retirement",
    "Active Adult Communities",
    "Memory Care Communities",
    "Others (Palliative Care, Concierge and Support Services, etc.)",
)

SERVICE_OFFERINGS: Tuple[str, ...] = (
    "Personal Care Services",
    "Health Monitoring Services",
    "Medication Management Services",
    "Social Activities and Engagement",
    "Household and Daily Life Support Services",
    "Transportation Services",
    "Others (Concierge and Support Services, etc.)",
)

CARE_OPTIONS: Tuple[str, ...] = ("Long Term Care", "Short Term Care")

APPLICATIONS: Tuple[str, ...] = (
    "Dementia Care",
    "Chronic & advanced heart disease",
    "Alzheimer Care",
    "Stroke",
    "Parkinson Disease care",
    "Cancer Care",
    "Post-Operative Care",
    "Mental Health Wellbeing",
    "Other (Palliative Care, etc.)",
)

GENDERS: Tuple[str, ...] = ("Male", "Female")

AGE_GROUPS: Tuple[str, ...] = (
    "Youngest old (65-74 years)",
    "Middle old (75-84 years)",
    "Oldest old (85 years and older)",
)


# =============================================================================
# FACETS
# =============================================================================

class Facet(str, Enum):
    """Categorical dimensions of the fact table, in generation nesting order"""
    YEAR = "year"
    COUNTRY = "country"
    TYPE = "type"
    SERVICE_OFFERING = "service_offering"
    CARE_OPTION = "care_option"
    APPLICATION = "application"
    GENDER = "gender"
    AGE_GROUP = "age_group"

    @property
    def column(self) -> str:
        """Column holding this facet in the fact table"""
        return self.value

    @property
    def domain(self) -> Tuple[Any, ...]:
        return FACET_DOMAINS[self]

    def value_of(self, record: Any) -> Any:
        """Read this facet's value from a fact record"""
        return _ACCESSORS[self](record)

    @classmethod
    def parse(cls, name: Any) -> Optional["Facet"]:
        """Resolve a facet from its column or export name, None if unknown"""
        if isinstance(name, Facet):
            return name
        return _FACET_ALIASES.get(str(name))


FACET_DOMAINS: Dict[Facet, Tuple[Any, ...]] = {
    Facet.YEAR: YEARS,
    Facet.COUNTRY: COUNTRIES,
    Facet.TYPE: TYPES,
    Facet.SERVICE_OFFERING: SERVICE_OFFERINGS,
    Facet.CARE_OPTION: CARE_OPTIONS,
    Facet.APPLICATION: APPLICATIONS,
    Facet.GENDER: GENDERS,
    Facet.AGE_GROUP: AGE_GROUPS,
}

_ACCESSORS: Dict[Facet, Callable[[Any], Any]] = {
    facet: attrgetter(facet.column) for facet in Facet
}

_FACET_ALIASES: Dict[str, Facet] = {}
for _facet in Facet:
    _FACET_ALIASES[_facet.value] = _facet
    _FACET_ALIASES[_facet.name] = _facet
_FACET_ALIASES.update({
    "serviceOffering": Facet.SERVICE_OFFERING,
    "careOption": Facet.CARE_OPTION,
    "ageGroup": Facet.AGE_GROUP,
})

# Facets exposed as main dashboard filters (type is only reachable through segments)
FILTER_FACETS: Tuple[Facet, ...] = (
    Facet.YEAR,
    Facet.SERVICE_OFFERING,
    Facet.CARE_OPTION,
    Facet.APPLICATION,
    Facet.GENDER,
    Facet.COUNTRY,
    Facet.AGE_GROUP,
)


# =============================================================================
# SEGMENTS
# =============================================================================

class Segment(str, Enum):
    """Segment choices offered by the cross-segment analysis"""
    TYPE = "By Type"
    SERVICE_OFFERING = "By Service Offering"
    CARE_OPTION = "By Care Option"
    APPLICATION = "By Application"
    GENDER = "By Gender"
    AGE_GROUP = "By Age Group"

    @property
    def facet(self) -> Facet:
        return _SEGMENT_FACETS[self]

    @property
    def selects_all(self) -> bool:
        """Whether the segment's sub-filter defaults to every available value"""
        return self in (Segment.GENDER, Segment.AGE_GROUP)

    @property
    def value_only(self) -> bool:
        """Whether the segment is meaningless under the volume view"""
        return self in (Segment.GENDER, Segment.AGE_GROUP)

    @classmethod
    def parse(cls, label: Any) -> Optional["Segment"]:
        if label is None or isinstance(label, Segment):
            return label
        try:
            return cls(str(label))
        except ValueError:
            return None


_SEGMENT_FACETS: Dict[Segment, Facet] = {
    Segment.TYPE: Facet.TYPE,
    Segment.SERVICE_OFFERING: Facet.SERVICE_OFFERING,
    Segment.CARE_OPTION: Facet.CARE_OPTION,
    Segment.APPLICATION: Facet.APPLICATION,
    Segment.GENDER: Facet.GENDER,
    Segment.AGE_GROUP: Facet.AGE_GROUP,
}
