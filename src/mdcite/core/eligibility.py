"""Extraction eligibility: an ordered chain of rules, first decision wins"""

from mdcite.core.extract.markers import FORCE_MARKER, STOP_MARKER
from mdcite.core.models import EligibilityDecision, ExtractionFlags, LinkObject


class ExtractionRule:
    """One link in the chain: return a decision, or None to defer to the next rule."""

    terminal = False

    def get_decision(self, link: LinkObject, flags: ExtractionFlags) -> EligibilityDecision | None:
        return None


def _marker_text(link: LinkObject) -> str | None:
    return link.extraction_marker.inner_text if link.extraction_marker else None


class StopMarkerRule(ExtractionRule):
    def get_decision(self, link, flags):
        if _marker_text(link) == STOP_MARKER:
            return EligibilityDecision(eligible=False, reason=f"{STOP_MARKER} marker prevents extraction")
        return None


class ForceMarkerRule(ExtractionRule):
    def get_decision(self, link, flags):
        if _marker_text(link) == FORCE_MARKER:
            return EligibilityDecision(eligible=True, reason=f"{FORCE_MARKER} overrides defaults")
        return None


class SectionLinkRule(ExtractionRule):
    def get_decision(self, link, flags):
        if link.anchor_type is not None:
            return EligibilityDecision(eligible=True, reason="Markdown anchor links eligible by default")
        return None


class FullFilesFlagRule(ExtractionRule):
    """Always decides; must be last in any chain."""

    terminal = True

    def get_decision(self, link, flags):
        if flags.full_files:
            return EligibilityDecision(eligible=True, reason="CLI flag --full-files forces extraction")
        return EligibilityDecision(eligible=False, reason="Full-file link ineligible without --full-files flag")


class EligibilityChain:
    """Evaluates rules in order and returns the first non-None decision.

    The last rule must be terminal, so evaluation always produces a decision.
    """

    def __init__(self, rules: list[ExtractionRule] | None = None):
        rules = list(rules) if rules is not None else default_rules()
        if not rules or not rules[-1].terminal:
            raise ValueError("EligibilityChain requires a terminal rule in last position")
        self.rules = rules

    def decide(self, link: LinkObject, flags: ExtractionFlags) -> EligibilityDecision:
        for rule in self.rules:
            decision = rule.get_decision(link, flags)
            if decision is not None:
                return decision
        # unreachable while the terminal rule holds its contract
        raise RuntimeError(f"{type(self.rules[-1]).__name__} returned no decision")


def default_rules() -> list[ExtractionRule]:
    return [StopMarkerRule(), ForceMarkerRule(), SectionLinkRule(), FullFilesFlagRule()]


def analyze_eligibility(
    link: LinkObject,
    flags: ExtractionFlags,
    rules: list[ExtractionRule] | None = None,
    ) -> EligibilityDecision:
    return EligibilityChain(rules).decide(link, flags)
