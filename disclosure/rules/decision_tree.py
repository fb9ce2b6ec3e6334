"""
Hand-authored decision tree over the disclosure attributes.

Mirrors the published flowchart box by box. It is maintained independently
of the YAML rule table so the two encodings can be cross-checked; it never
consults the rule engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from disclosure.core.ontology.attributes import (
    FERPA_EXCEPTION_ATTRIBUTES,
    AttributeName,
    DisclosureAttributes,
)
from disclosure.runtime.trace import EvaluatorKind, Trace, Verdict

FAFSA_SCOPE_NOTE = (
    "Share only the information the contributor provided on the FAFSA; "
    "the contributor may not redisclose the student's data."
)
JUDICIAL_CAUTION_NOTE = (
    "Permitted for judicial orders, lawfully issued subpoenas or financial aid "
    "the student applied for; consult counsel before releasing records."
)


@dataclass(frozen=True)
class _Outcome:
    rule_id: str
    verdict: Verdict
    scope_note: str | None = None
    caution_note: str | None = None


# FERPA 99.31 exceptions, Boxes 11-19, paired with the rule each one fires.
_FERPA_EXCEPTION_OUTCOMES: tuple[tuple[AttributeName, _Outcome], ...] = tuple(
    zip(
        FERPA_EXCEPTION_ATTRIBUTES,
        (
            _Outcome("FERPA_R1_directory_info", Verdict.PERMIT),
            _Outcome("FERPA_R2_school_official_LEI", Verdict.PERMIT),
            _Outcome(
                "FERPA_R3_judicial_or_finaid_related",
                Verdict.PERMIT_WITH_CAUTION,
                caution_note=JUDICIAL_CAUTION_NOTE,
            ),
            _Outcome("FERPA_R4_other_school_enrollment", Verdict.PERMIT),
            _Outcome("FERPA_R5_authorized_representatives", Verdict.PERMIT),
            _Outcome(
                "FERPA_R6_research_org_predictive_tests_admin_aid_improve_instruction",
                Verdict.PERMIT,
            ),
            _Outcome("FERPA_R7_accrediting_agency", Verdict.PERMIT),
            _Outcome("FERPA_R8_parent_of_dependent_student", Verdict.PERMIT),
            _Outcome("FERPA_R9_otherwise_permitted_99_31", Verdict.PERMIT),
        ),
    )
)


class DecisionTree:
    """Nested boolean evaluation of the disclosure flowchart.

    ``evaluate`` returns a Trace whose path lists the flowchart boxes that
    were checked; ``disclose`` answers the yes/no question only.
    """

    def disclose(self, attributes: DisclosureAttributes) -> bool:
        return self.evaluate(attributes).permitted

    def evaluate(self, attributes: DisclosureAttributes) -> Trace:
        path: list[str] = ["box_1_fti"]
        if attributes.includes_fti:
            outcome = self._fti_branch(attributes, path)
        else:
            outcome = self._non_fti_branch(attributes, path)

        return Trace(
            rule_id=outcome.rule_id,
            verdict=outcome.verdict,
            path=path,
            scope_note=outcome.scope_note,
            caution_note=outcome.caution_note,
            source=EvaluatorKind.DECISION_TREE,
        )

    # -------------------------------------------------------------------------
    # FTI page (IRC 6103)
    # -------------------------------------------------------------------------

    def _fti_branch(self, attrs: DisclosureAttributes, path: list[str]) -> _Outcome:
        path.append("fti_box_2_student")
        if attrs.disclosure_to_student:
            return _Outcome("FTI_R1_student", Verdict.PERMIT)

        path.append("fti_box_3_aid_admin")
        if attrs.used_for_aid_admin:
            path.append("fti_box_4_school_official")
            if attrs.to_school_official_legitimate_interest:
                return _Outcome("FTI_R2_aid_admin_school_official", Verdict.PERMIT)
            return _Outcome("FTI_R2b_aid_admin_deny", Verdict.DENY)

        path.append("fti_box_5_scholarship")
        if attrs.disclosure_to_scholarship_org and attrs.explicit_written_consent:
            return _Outcome("FTI_R3_scholarship_with_consent", Verdict.PERMIT)

        return _Outcome("FTI_DENY_default", Verdict.DENY)

    # -------------------------------------------------------------------------
    # Non-FTI page (HEA 483(a)(3)(E) and FERPA)
    # -------------------------------------------------------------------------

    def _non_fti_branch(self, attrs: DisclosureAttributes, path: list[str]) -> _Outcome:
        path.append("box_2_student")
        if attrs.disclosure_to_student:
            return _Outcome("FAFSA_R1_to_student", Verdict.PERMIT)

        path.append("box_3_fafsa")
        if attrs.is_fafsa_data:
            outcome = self._fafsa_boxes(attrs, path)
            if outcome is not None:
                return outcome

        return self._ferpa_boxes(attrs, path)

    def _fafsa_boxes(self, attrs: DisclosureAttributes, path: list[str]) -> _Outcome | None:
        path.append("box_4_contributor")
        if attrs.disclosure_to_contributor_parent_or_spouse:
            return _Outcome(
                "FAFSA_R2_to_contributor_scope_limited",
                Verdict.PERMIT_WITH_SCOPE,
                scope_note=FAFSA_SCOPE_NOTE,
            )

        path.append("box_5_aid_admin")
        if attrs.used_for_aid_admin:
            return _Outcome("FAFSA_R3_used_for_aid_admin", Verdict.PERMIT)

        path.append("box_6_scholarship")
        if attrs.disclosure_to_scholarship_org and attrs.explicit_written_consent:
            return _Outcome("FAFSA_R4_scholarship_with_consent", Verdict.PERMIT)

        path.append("box_7_research")
        if attrs.research_promote_attendance:
            return _Outcome("FAFSA_R5_institutional_research_promote_attendance", Verdict.PERMIT)

        path.append("box_8_hea_consent")
        if attrs.hea_written_consent:
            return _Outcome("FAFSA_R6_HEA_written_consent", Verdict.PERMIT)

        path.append("box_9_pii")
        if not attrs.contains_pii:
            return _Outcome("FAFSA_R7_no_pii", Verdict.PERMIT)

        # PII-bearing FAFSA data falls through to the FERPA consent check
        return None

    def _ferpa_boxes(self, attrs: DisclosureAttributes, path: list[str]) -> _Outcome:
        path.append("box_10_ferpa_consent")
        if attrs.ferpa_written_consent:
            return _Outcome("FERPA_R0_written_consent", Verdict.PERMIT)

        for box, (attribute, outcome) in enumerate(_FERPA_EXCEPTION_OUTCOMES, start=11):
            path.append(f"box_{box}_{attribute.value}")
            if attrs.get(attribute):
                return outcome

        return _Outcome("NONFTI_DENY_default", Verdict.DENY)
