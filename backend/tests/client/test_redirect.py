"""Payment Redirect: query-string parsing of the post-checkout URL."""

from stoic_journal.client.redirect import PaymentRedirect


def test_success_with_track_and_session():
    redirect = PaymentRedirect.from_url(
        "https://app.test/?success=true&track=Money&session_id=cs_test_123",
    )
    assert redirect.success is True
    assert redirect.canceled is False
    assert redirect.track == "Money"
    assert redirect.session_id == "cs_test_123"
    assert redirect.is_payment_return


def test_flags_require_literal_true():
    redirect = PaymentRedirect.from_url("https://app.test/?success=1&bundle=yes")
    assert redirect.success is False
    assert redirect.bundle is False
    assert not redirect.is_payment_return


def test_canceled():
    redirect = PaymentRedirect.from_url("https://app.test/?canceled=true")
    assert redirect.canceled is True
    assert redirect.is_payment_return


def test_session_id_recovered_from_fragment():
    redirect = PaymentRedirect.from_url(
        "https://app.test/?success=true&track=Ego#/done?session_id=cs_frag_9",
    )
    assert redirect.session_id == "cs_frag_9"


def test_session_id_stops_at_next_parameter():
    redirect = PaymentRedirect.from_url(
        "https://app.test/#x?session_id=cs_a1&track=Ego",
    )
    assert redirect.session_id == "cs_a1"


def test_plain_url_has_nothing():
    redirect = PaymentRedirect.from_url("https://app.test/dashboard")
    assert redirect == PaymentRedirect()
