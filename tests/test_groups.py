"""
Tests for group header detection.
"""

from sheet_review import Group, GroupIndex, find_group_column

PREFIX = "Revision group"


def make_rows():
    return [
        ["Intro", None],                  # 0: before any group
        ["Revision group A", None],       # 1
        [1, "Pump"],                      # 2
        [2, "Valve"],                     # 3
        ["  Revision group B  ", None],   # 4
        [1, "Motor"],                     # 5
        ["Revision group C", None],       # 6
    ]


class TestFindGroupColumn:

    def test_first_matching_header(self):
        assert find_group_column(["No", "Name", " Revision group", "Revision group 2"], PREFIX) == 2

    def test_no_group_column(self):
        assert find_group_column(["No", "Name"], PREFIX) == -1
        assert find_group_column([], PREFIX) == -1


class TestGroupIndex:

    def test_header_rows(self):
        index = GroupIndex.from_rows(make_rows(), PREFIX)
        assert index.header_rows == [1, 4, 6]
        assert len(index) == 3

    def test_owner_of(self):
        index = GroupIndex.from_rows(make_rows(), PREFIX)
        assert index.owner_of(0) is None
        assert index.owner_of(1) == 1
        assert index.owner_of(3) == 1
        assert index.owner_of(5) == 4
        assert index.owner_of(6) == 6

    def test_groups(self):
        """The last group runs to the final row."""
        index = GroupIndex.from_rows(make_rows(), PREFIX)
        assert list(index.groups()) == [Group(1, 3), Group(4, 5), Group(6, 6)]
        assert list(Group(1, 3).data_rows) == [2, 3]
        assert list(Group(6, 6).data_rows) == []

    def test_group_of(self):
        index = GroupIndex.from_rows(make_rows(), PREFIX)
        assert index.group_of(0) is None
        assert index.group_of(2) == Group(1, 3)
        assert index.group_of(4) == Group(4, 5)

    def test_is_group_header(self):
        index = GroupIndex.from_rows(make_rows(), PREFIX)
        assert index.is_group_header(4)
        assert not index.is_group_header(5)
        assert not index.is_group_header(0)

    def test_no_groups(self):
        index = GroupIndex.from_rows([[1, "a"], [], [None, "b"]], PREFIX)
        assert index.header_rows == []
        assert list(index.groups()) == []
        assert index.owner_of(2) is None
