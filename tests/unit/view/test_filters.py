from __future__ import annotations

import pytest

from member_directory.view.filters import (
    FilterCriteria,
    Tab,
    filter_records,
    matches_tab,
)
from tests.conftest import OTHER_BRANCH, make_member, make_visitor, with_ids


@pytest.fixture()
def records():
    return with_ids(
        make_member("Ann Mensah", membership_level="convert", email="ann@example.com"),
        make_member(
            "Kwame Worker", membership_level="baptized", sub_level="worker"
        ),
        make_member(
            "Efua Disciple", membership_level="baptized", sub_level="disciple"
        ),
        make_member(
            "Yaw Leader",
            membership_level="baptized",
            sub_level="leader",
            leader_role="pastor",
            branch_id=OTHER_BRANCH,
        ),
        make_visitor("Joanna Asante", phone="0551234567"),
        make_visitor("Kojo Owusu", email="kojo@annex.org", follow_up_status="called"),
        make_visitor("Ama Darko", branch_id=OTHER_BRANCH),
    )


def _names(records) -> list[str]:
    return [r.display_name for r in records]


class TestTabs:
    def test_all_tab_holds_members_only(self, records):
        result = filter_records(records, FilterCriteria())
        assert _names(result) == [
            "Ann Mensah",
            "Kwame Worker",
            "Efua Disciple",
            "Yaw Leader",
        ]

    def test_workers_tab_includes_disciples(self, records):
        result = filter_records(records, FilterCriteria(tab=Tab.workers))
        assert _names(result) == ["Kwame Worker", "Efua Disciple"]

    def test_disciples_and_leaders(self, records):
        assert _names(filter_records(records, FilterCriteria(tab="disciples"))) == [
            "Efua Disciple"
        ]
        assert _names(filter_records(records, FilterCriteria(tab="leaders"))) == [
            "Yaw Leader"
        ]

    def test_pastors_tab_uses_leader_role(self, records):
        assistant = make_member("Abena", leader_role="assistant_pastor")
        assert matches_tab(assistant, Tab.pastors)
        result = filter_records(records, FilterCriteria(tab=Tab.pastors))
        assert _names(result) == ["Yaw Leader"]

    def test_converts_tab(self, records):
        result = filter_records(records, FilterCriteria(tab=Tab.converts))
        assert _names(result) == ["Ann Mensah"]

    def test_visitors_tab(self, records):
        result = filter_records(records, FilterCriteria(tab=Tab.visitors))
        assert _names(result) == ["Joanna Asante", "Kojo Owusu", "Ama Darko"]


class TestSearch:
    def test_visitors_search_matches_name_email_and_phone_in_order(self, records):
        criteria = FilterCriteria(tab=Tab.visitors, search_term="ann")
        result = filter_records(records, criteria)
        # "Joanna" by name, "kojo@annex.org" by email; members never leak in
        assert _names(result) == ["Joanna Asante", "Kojo Owusu"]

    def test_search_is_case_insensitive(self, records):
        criteria = FilterCriteria(search_term="  MENSAH ")
        assert _names(filter_records(records, criteria)) == ["Ann Mensah"]

    def test_search_by_phone_digits(self, records):
        criteria = FilterCriteria(tab=Tab.visitors, search_term="1234")
        assert _names(filter_records(records, criteria)) == ["Joanna Asante"]

    def test_empty_term_matches_everything(self, records):
        assert filter_records(records, FilterCriteria(search_term="")) == (
            filter_records(records, FilterCriteria())
        )


class TestBranchAndLevel:
    def test_branch_filter(self, records):
        criteria = FilterCriteria(tab=Tab.visitors, branch_id=OTHER_BRANCH)
        assert _names(filter_records(records, criteria)) == ["Ama Darko"]

    def test_level_filter_on_members(self, records):
        criteria = FilterCriteria(membership_level="baptized")
        assert _names(filter_records(records, criteria)) == [
            "Kwame Worker",
            "Efua Disciple",
            "Yaw Leader",
        ]

    def test_level_filter_on_visitors_uses_follow_up_status(self, records):
        criteria = FilterCriteria(tab=Tab.visitors, membership_level="called")
        assert _names(filter_records(records, criteria)) == ["Kojo Owusu"]


class TestEdgeCases:
    def test_empty_input(self):
        assert filter_records([], FilterCriteria(search_term="x")) == []

    def test_result_is_an_ordered_subsequence(self, records):
        result = filter_records(records, FilterCriteria(tab=Tab.workers))
        positions = [records.index(r) for r in result]
        assert positions == sorted(positions)

    def test_wildcard_criteria(self):
        assert FilterCriteria(tab=Tab.leaders).is_wildcard
        assert not FilterCriteria(search_term="a").is_wildcard
        assert not FilterCriteria(branch_id="accra").is_wildcard

    def test_unknown_tab_is_rejected(self):
        with pytest.raises(ValueError):
            FilterCriteria(tab="elders")

    def test_replace_builds_a_new_criteria(self):
        criteria = FilterCriteria()
        changed = criteria.replace(search_term="ann")
        assert criteria.search_term == ""
        assert changed.search_term == "ann"
        assert changed != criteria
