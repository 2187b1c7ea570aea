"""
tests/test_business_value.py
Unit tests for report/business_value.py extraction heuristic.
"""

from adf import flatten
from report.business_value import NO_CONTENT, NOT_FOUND, Found, extract_business_value
from helpers import business_value_doc


def test_extracts_trimmed_content_between_labels():
    flattened = 'intro Business value\n  Improves retention  \nCustomer value\n more text'

    assert extract_business_value(flattened) == Found('Improves retention')


def test_preserves_inner_line_breaks():
    flattened = 'Business value\nFaster builds\nfor every team\nCustomer value'

    assert extract_business_value(flattened) == Found('Faster builds\nfor every team')


def test_placeholder_only_is_not_found():
    assert extract_business_value('Business value <> Customer value') is NOT_FOUND


def test_placeholder_inside_content_is_not_found():
    assert extract_business_value('Business value foo <> bar Customer value') is NOT_FOUND


def test_missing_business_value_label_is_not_found():
    assert extract_business_value('Customer value only here') is NOT_FOUND
    assert extract_business_value('') is NOT_FOUND


def test_missing_customer_value_label_is_not_found():
    assert extract_business_value('Business value without an end label') is NOT_FOUND


def test_empty_section_is_not_found():
    assert extract_business_value('Business value\n   \nCustomer value') is NOT_FOUND


def test_only_first_labelled_span_is_captured():
    flattened = 'Business value X Customer value Business value Y Customer value'

    assert extract_business_value(flattened) == Found('X')


def test_labels_are_case_sensitive():
    assert extract_business_value('business value X customer value') is NOT_FOUND


def test_label_in_earlier_prose_wins():
    # Heuristic limitation: the first "Business value" in the text is used
    flattened = 'See Business value notes below.\nBusiness value\nReal\nCustomer value'

    assert extract_business_value(flattened) == Found('notes below.\nBusiness value\nReal')


def test_not_found_renders_as_sentinel_text():
    assert str(NOT_FOUND) == NO_CONTENT == 'No content found'
    assert not NOT_FOUND
    assert str(Found('Saves money')) == 'Saves money'


def test_extracts_from_flattened_template_document():
    flattened = flatten(business_value_doc('Reduces support tickets'))

    assert flattened.startswith('Business value\nReduces support tickets\nCustomer value')
    assert extract_business_value(flattened) == Found('Reduces support tickets')
