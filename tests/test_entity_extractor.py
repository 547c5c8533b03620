"""
Tests for Entity Extractor
==========================
Tests for owner, date, department and role extraction.
"""

from datetime import date

import pytest

from procedure_review.entity_extractor import (
    extract_dates, extract_departments, extract_entities, extract_owners, extract_roles,
    is_valid_date, is_valid_owner_name, parse_date
)


class TestOwnerValidation:
    """Tests for is_valid_owner_name."""

    @pytest.mark.parametrize('name', ['Jane Smith', 'Mary-Jane Evans', 'J. R. Hartley', 'Li Wei'])
    def test_valid_names(self, name):
        assert is_valid_owner_name(name)

    @pytest.mark.parametrize('name', [
        '', 'J', 'TBD', 'Name', 'n/a', 'Pending review', '12345', '---',
        'Version 2', 'Page 3', 'Sign-off date', 'Effective Date', 'Table of Contents',
        'Jane Smith (Finance)', 'x' * 101,
    ])
    def test_invalid_names(self, name):
        assert not is_valid_owner_name(name)


class TestOwnerExtraction:
    """Tests for extract_owners."""

    def test_placeholder_rejected(self):
        """Template placeholders are dropped, real names kept."""
        text = "Owner: TBD\nPrepared by: Jane Smith"
        assert extract_owners(text) == ('Jane Smith',)

    def test_value_stops_at_comma(self):
        assert extract_owners("Owner: Jane Smith, Finance Manager") == ('Jane Smith',)

    def test_value_stops_at_line_end(self):
        """The owner value must be on the same line as the label."""
        assert extract_owners("Owner:\nJane Smith") == ()

    def test_table_cell_separator(self):
        """Table rows join cells with a pipe; it is not part of the value."""
        assert extract_owners("Owner: | Jane Smith") == ('Jane Smith',)
        assert extract_owners("Owner: | Jane Smith | Finance Manager") == ('Jane Smith',)

    def test_full_width_colon(self):
        assert extract_owners("Owner：Jane Smith") == ('Jane Smith',)

    def test_all_labels(self):
        """Every owner label is recognised, in rule order."""
        text = (
            "Maintained by: Ann Lee\n"
            "Procedure Owner: Bob Stone\n"
            "Authored by: Carl Moss\n"
            "Created by: Dora Kent\n"
        )
        assert extract_owners(text) == ('Bob Stone', 'Carl Moss', 'Dora Kent', 'Ann Lee')

    def test_duplicates_removed(self):
        text = "Owner: Jane Smith\nPrepared by: Jane Smith\nMaintained by: Mark Evans"
        assert extract_owners(text) == ('Jane Smith', 'Mark Evans')

    def test_no_owners(self):
        assert extract_owners("This procedure has no ownership section.") == ()


class TestDateParsing:
    """Tests for parse_date and is_valid_date."""

    @pytest.mark.parametrize('value, expected', [
        ('15/03/2024', date(2024, 3, 15)),
        ('2024-03-15', date(2024, 3, 15)),
        ('2024.12.01', date(2024, 12, 1)),
        ('03/25/2024', date(2024, 3, 25)),
        ('01/06/24', date(2024, 6, 1)),
        ('15 March 2025', date(2025, 3, 15)),
        ('12 Sept 2024', date(2024, 9, 12)),
        ('March 5, 2024', date(2024, 3, 5)),
    ])
    def test_shapes(self, value, expected):
        assert parse_date(value) == expected

    def test_unparseable(self):
        assert parse_date('not a date') is None
        assert parse_date('') is None

    def test_impossible_date(self):
        """Neither day-first nor month-first makes 31/02 valid."""
        assert parse_date('31/02/2024') is None
        assert not is_valid_date('31/02/2024')

    @pytest.mark.parametrize('value', ['01/06/1985', '01/06/2045', '1/1/1990', '1/1/2040'])
    def test_year_bounds(self, value):
        assert not is_valid_date(value)

    def test_year_inside_bounds(self):
        assert is_valid_date('1/1/1991')
        assert is_valid_date('31/12/2039')

    def test_too_short(self):
        assert not is_valid_date('1/1/')


class TestDateExtraction:
    """Tests for extract_dates."""

    def test_labelled_date(self):
        assert extract_dates("Review date: 01/06/2024") == ('01/06/2024',)

    def test_labelled_date_with_month_name(self):
        assert extract_dates("Next review date: 15 March 2025") == ('15 March 2025',)

    def test_bare_iso_date(self):
        """An ISO date is not also matched as a day-first fragment."""
        assert extract_dates("Signed 2024-03-15 by the board") == ('2024-03-15',)

    def test_month_name_day_year(self):
        assert extract_dates("Approved on March 5, 2024.") == ('March 5, 2024',)

    def test_out_of_range_rejected(self):
        assert extract_dates("Review date: 01/06/1985") == ()

    def test_invalid_calendar_date_rejected(self):
        assert extract_dates("Effective date: 31/02/2024") == ()

    def test_two_digit_year(self):
        assert extract_dates("Effective date: 01/06/24") == ('01/06/24',)

    def test_duplicates_removed(self):
        text = "Approval date: 15/03/2024\nSigned 15/03/2024"
        assert extract_dates(text) == ('15/03/2024',)

    def test_table_cell_separator(self):
        assert extract_dates("Review date: | 15/03/2024") == ('15/03/2024',)


class TestDepartmentsAndRoles:
    """Tests for department and role extraction."""

    def test_departments(self):
        text = "Team: Payments Ops\nDepartment: Finance\nDivision: Retail Banking"
        assert extract_departments(text) == ('Finance', 'Retail Banking', 'Payments Ops')

    def test_department_too_short(self):
        assert extract_departments("Unit: IT") == ()

    def test_department_table_cell(self):
        assert extract_departments("Department: | Finance Operations") == ('Finance Operations',)

    def test_roles(self):
        text = "The Operations Manager and the team lead review the Director's report."
        assert extract_roles(text) == ('manager', 'director', 'lead')

    def test_roles_whole_words(self):
        """Role keywords inside longer words do not count."""
        assert extract_roles("Management leadership at headquarters") == ()

    def test_extract_entities(self, complete_text):
        """The complete procedure yields every entity type."""
        entities = extract_entities(complete_text)
        assert entities.owners == ('Jane Smith', 'Mark Evans')
        assert entities.sign_off_dates == ('15/03/2024', '15 March 2025')
        assert entities.departments == ('Finance Operations',)
        assert entities.roles == ('manager', 'director', 'analyst', 'senior', 'head')
