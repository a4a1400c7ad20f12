import pytest

from finance.identity import DonorKey, View, resolve, resolve_identifier


def test_fund_summary_merges_anonymous():
    a = resolve_identifier(True, 1, "a@x", "A", View.FUND_SUMMARY, donation_id=10)
    b = resolve_identifier(True, None, None, None, View.FUND_SUMMARY, donation_id=11)
    assert a == b == DonorKey("anonymous", anonymous=True)


def test_fund_summary_keys_named_donors_by_display_name():
    assert resolve_identifier(False, 1, "a@x", "Budi", View.FUND_SUMMARY).identifier == "Budi"
    assert resolve_identifier(False, 1, "a@x", "", View.FUND_SUMMARY, user_name="Budi S").identifier == "Budi S"
    assert resolve_identifier(False, None, None, None, View.FUND_SUMMARY).identifier == "unknown"


def test_program_donors_never_merge_anonymous():
    a = resolve_identifier(True, 1, None, None, View.PROGRAM_DONORS, donation_id=10)
    b = resolve_identifier(True, 1, None, None, View.PROGRAM_DONORS, donation_id=11)
    assert a.identifier == "anonymous-10"
    assert b.identifier == "anonymous-11"
    assert a.anonymous


@pytest.mark.parametrize("view", [View.PROGRAM_DONORS, View.TOP_DONORS])
def test_named_precedence_user_then_email_then_name(view):
    assert resolve_identifier(False, 7, "a@x", "A", view).identifier == "7"
    assert resolve_identifier(False, None, "a@x", "A", view).identifier == "a@x"
    assert resolve_identifier(False, None, "", "A", view).identifier == "A"


def test_top_donors_drop_anonymous():
    assert resolve_identifier(True, 7, "a@x", "A", View.TOP_DONORS) is None


def test_views_accept_plain_strings():
    assert resolve_identifier(False, 3, None, None, "top_donors") == DonorKey("3")


@pytest.mark.django_db
def test_resolve_reads_donation_row(program, donor, make_donation):
    d = make_donation(program, 1000, user=donor)
    assert resolve(d, View.TOP_DONORS) == DonorKey(str(donor.pk))
    assert resolve(d, View.FUND_SUMMARY) == DonorKey(donor.name)
