"""Tests for rule table loading and the ordered rule engine."""

import logging
from types import SimpleNamespace

import pytest
import yaml
from pathlib import Path

from disclosure.core.errors import ConfigurationError
from disclosure.rules import Condition, Rule, RuleEngine, RuleLoader, RuleTable, RuleTableError
from disclosure.runtime.trace import EvaluatorKind, Verdict


class TestRuleLoader:
    def test_load_packaged_table(self, rule_table: RuleTable):
        assert len(rule_table) == 23
        assert rule_table.rule_ids[0] == "FTI_R1_student"
        assert rule_table.rule_ids[-1] == "NONFTI_DENY_default"
        assert rule_table.source_path.endswith("disclosure_rules.yaml")

    def test_rule_ids_unique(self, rule_table: RuleTable):
        assert len(set(rule_table.rule_ids)) == len(rule_table)

    def test_get_rule(self, rule_table: RuleTable):
        rule = rule_table.get_rule("FAFSA_R2_to_contributor_scope_limited")
        assert rule.result is Verdict.PERMIT_WITH_SCOPE
        assert rule.scope_note
        assert rule_table.get_rule("NOPE") is None

    def test_caution_rule_advises_counsel(self, rule_table: RuleTable):
        rule = rule_table.get_rule("FERPA_R3_judicial_or_finaid_related")
        assert rule.result is Verdict.PERMIT_WITH_CAUTION
        assert "consult counsel" in rule.caution_note

    def test_every_rule_cites_a_source(self, rule_table: RuleTable):
        for rule in rule_table.rules:
            assert rule.citation, rule.id

    def test_packaged_table_uses_known_attributes(self, data_dir: Path):
        table = RuleLoader(strict_attribute_names=True).load_file(data_dir / "disclosure_rules.yaml")
        assert all(not rule.unknown_attributes() for rule in table.rules)

    def test_parse_minimal(self, minimal_rules: dict):
        table = RuleLoader().parse(minimal_rules)
        assert table.rule_ids == ["FTI_DENY", "STUDENT", "NONFTI_DENY"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(RuleTableError, match="not found"):
            RuleLoader().load_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules: [unclosed")
        with pytest.raises(RuleTableError, match="not valid YAML"):
            RuleLoader().load_file(path)

    def test_not_a_rules_document(self):
        with pytest.raises(RuleTableError):
            RuleLoader().parse(["just", "a", "list"])
        with pytest.raises(RuleTableError):
            RuleLoader().parse({"rules": "nope"})

    def test_invalid_result(self, minimal_rules: dict):
        minimal_rules["rules"][1]["result"] = "maybe"
        with pytest.raises(RuleTableError, match="STUDENT"):
            RuleLoader().parse(minimal_rules)

    def test_blank_condition(self, minimal_rules: dict):
        minimal_rules["rules"][1]["when_all"] = ["!"]
        with pytest.raises(RuleTableError):
            RuleLoader().parse(minimal_rules)

    def test_double_negation_rejected(self, minimal_rules: dict):
        for condition in ("!!includes_fti", "! !includes_fti"):
            minimal_rules["rules"][1]["when_all"] = [condition, "disclosure_to_student"]
            with pytest.raises(RuleTableError, match="negated only once"):
                RuleLoader().parse(minimal_rules)

    def test_duplicate_ids(self, minimal_rules: dict):
        minimal_rules["rules"][1]["id"] = "FTI_DENY"
        with pytest.raises(RuleTableError, match="Duplicate rule ids: FTI_DENY"):
            RuleLoader().parse(minimal_rules)

    def test_missing_fti_catch_all(self, minimal_rules: dict):
        del minimal_rules["rules"][0]
        with pytest.raises(RuleTableError, match="FTI branch"):
            RuleLoader().parse(minimal_rules)

    def test_missing_non_fti_catch_all(self, minimal_rules: dict):
        del minimal_rules["rules"][2]
        with pytest.raises(RuleTableError, match="non-FTI branch"):
            RuleLoader().parse(minimal_rules)

    def test_unconditioned_rule_is_catch_all(self):
        table = RuleLoader().parse({"rules": [{"id": "ALL", "when_all": [], "result": "deny"}]})
        assert table.rule_ids == ["ALL"]

    def test_unknown_attribute_warns(self, minimal_rules: dict, caplog):
        minimal_rules["rules"][1]["when_all"].append("disclosure_to_studnet")
        with caplog.at_level(logging.WARNING, logger="disclosure.rules.service"):
            table = RuleLoader().parse(minimal_rules)
        assert "disclosure_to_studnet" in caplog.text
        assert table.get_rule("STUDENT").unknown_attributes() == ["disclosure_to_studnet"]

    def test_unknown_attribute_strict(self, minimal_rules: dict):
        minimal_rules["rules"][1]["when_all"].append("disclosure_to_studnet")
        with pytest.raises(RuleTableError, match="unknown attributes"):
            RuleLoader(strict_attribute_names=True).parse(minimal_rules)

    def test_rule_table_error_is_configuration_error(self):
        assert issubclass(RuleTableError, ConfigurationError)


class TestCondition:
    def test_parse(self):
        assert Condition.parse("includes_fti") == Condition(attribute="includes_fti")
        assert Condition.parse("!includes_fti") == Condition(attribute="includes_fti", negated=True)
        assert Condition.parse(" ! contains_pii ").negated is True

    def test_str_round_trip(self):
        for text in ("includes_fti", "!contains_pii"):
            assert str(Condition.parse(text)) == text

    def test_holds(self, attrs):
        assert Condition.parse("includes_fti").holds(attrs("includes_fti"))
        assert not Condition.parse("!includes_fti").holds(attrs("includes_fti"))
        assert Condition.parse("!includes_fti").holds(attrs())

    def test_unknown_attribute_reads_false(self, attrs):
        assert not Condition.parse("no_such_flag").holds(attrs("includes_fti"))
        assert Condition.parse("!no_such_flag").holds(attrs())


class TestRuleEngine:
    def test_fti_student(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("includes_fti", "disclosure_to_student"))
        assert trace.rule_id == "FTI_R1_student"
        assert trace.verdict is Verdict.PERMIT
        assert trace.path == ["FTI_R1_student"]
        assert trace.source is EvaluatorKind.RULE_ENGINE

    def test_all_false_visits_every_rule(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs())
        assert trace.rule_id == "NONFTI_DENY_default"
        assert trace.denied
        assert trace.path == engine.table.rule_ids
        assert len(trace.path) == len(engine.rules)

    def test_path_ends_with_match(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("is_fafsa_data", "used_for_aid_admin", contains_pii=True))
        assert trace.rule_id == "FAFSA_R3_used_for_aid_admin"
        assert trace.path[-1] == trace.rule_id
        assert "FTI_DENY_default" in trace.path

    def test_first_match_wins(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("includes_fti", "disclosure_to_student", "used_for_aid_admin"))
        assert trace.rule_id == "FTI_R1_student"

    def test_fti_aid_admin_without_school_official_denied(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("includes_fti", "used_for_aid_admin"))
        assert trace.rule_id == "FTI_R2b_aid_admin_deny"
        assert trace.denied

    def test_fti_scholarship_requires_consent(self, engine: RuleEngine, attrs):
        assert engine.evaluate(
            attrs("includes_fti", "disclosure_to_scholarship_org", "explicit_written_consent")
        ).rule_id == "FTI_R3_scholarship_with_consent"
        assert engine.evaluate(
            attrs("includes_fti", "disclosure_to_scholarship_org")
        ).rule_id == "FTI_DENY_default"

    def test_fti_ignores_ferpa_exceptions(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("includes_fti", "ferpa_written_consent", "directory_info_and_not_opted_out"))
        assert trace.rule_id == "FTI_DENY_default"

    def test_contributor_scope_note(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(
            attrs("is_fafsa_data", "disclosure_to_contributor_parent_or_spouse", contains_pii=True)
        )
        assert trace.verdict is Verdict.PERMIT_WITH_SCOPE
        assert trace.scope_note
        assert trace.permitted

    def test_fafsa_without_pii(self, engine: RuleEngine, attrs):
        assert engine.evaluate(attrs("is_fafsa_data")).rule_id == "FAFSA_R7_no_pii"

    def test_fafsa_with_pii_falls_through_to_ferpa(self, engine: RuleEngine, attrs):
        assert engine.evaluate(attrs("is_fafsa_data", "contains_pii")).rule_id == "NONFTI_DENY_default"
        assert engine.evaluate(
            attrs("is_fafsa_data", "contains_pii", "ferpa_written_consent")
        ).rule_id == "FERPA_R0_written_consent"

    def test_judicial_caution(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("due_to_judicial_order_or_subpoena_or_financial_aid"))
        assert trace.verdict is Verdict.PERMIT_WITH_CAUTION
        assert "consult counsel" in trace.caution_note
        assert trace.outcome is Verdict.PERMIT

    def test_ferpa_exceptions_in_order(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("to_accrediting_agency", "directory_info_and_not_opted_out"))
        assert trace.rule_id == "FERPA_R1_directory_info"

    def test_trace_carries_citation(self, engine: RuleEngine, attrs):
        trace = engine.evaluate(attrs("ferpa_written_consent"))
        assert trace.citation == "34 CFR 99.30"

    def test_rule_lookup(self, engine: RuleEngine, rule_table: RuleTable):
        assert engine.rule_ids == rule_table.rule_ids
        assert engine.get_rule("FERPA_R0_written_consent").result is Verdict.PERMIT
        assert engine.get_rule("NO_SUCH_RULE") is None

    def test_no_match_raises(self, attrs):
        table = RuleTable(rules=(Rule(id="ALL", when_all=[], result=Verdict.DENY),))
        assert RuleEngine(table).evaluate(attrs()).rule_id == "ALL"

        # Unvalidated stand-in without catch-alls
        unchecked = SimpleNamespace(
            rules=(Rule(id="NEVER", when_all=["includes_fti", "!includes_fti"], result=Verdict.DENY),),
        )
        with pytest.raises(RuleTableError, match="No rule matched"):
            RuleEngine(unchecked).evaluate(attrs())

    def test_engine_reads_table_from_file(self, tmp_path: Path, minimal_rules: dict, attrs):
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump(minimal_rules))
        engine = RuleEngine(RuleLoader().load_file(path))
        assert engine.evaluate(attrs("disclosure_to_student")).rule_id == "STUDENT"
        assert engine.evaluate(attrs("includes_fti", "disclosure_to_student")).rule_id == "FTI_DENY"
