"""Unit tests for identity resolution against the lead store."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from leadbridge.db.models import Lead
from leadbridge.errors import MissingIdentity, StoreError
from leadbridge.services.resolver import resolve_lead


class TestNormalization:
    async def test_email_matches_case_insensitively(self, session, add_leads):
        await add_leads(Lead(external_lead_id="L1", email="A@X.com", phone="11988887777"))

        lead = await resolve_lead(session, "  a@X.COM ", None)

        assert lead is not None
        assert lead.external_lead_id == "L1"

    async def test_phone_is_reduced_to_digits(self, session, add_leads):
        await add_leads(Lead(external_lead_id="L1", phone="11988887777"))

        lead = await resolve_lead(session, None, "(11) 98888-7777")

        assert lead.external_lead_id == "L1"

    async def test_either_key_is_enough(self, session, add_leads):
        await add_leads(Lead(external_lead_id="L1", email="a@x.com", phone="111"))

        lead = await resolve_lead(session, "other@x.com", "111")

        assert lead.external_lead_id == "L1"

    async def test_no_match_returns_none(self, session, add_leads):
        await add_leads(Lead(external_lead_id="L1", email="a@x.com"))

        assert await resolve_lead(session, "nobody@x.com", None) is None


class TestMissingIdentity:
    @pytest.mark.parametrize(
        ("email", "phone"),
        [(None, None), ("", ""), ("   ", "--"), (None, "(  ) -")],
    )
    async def test_raises_without_querying(self, email, phone):
        session = AsyncMock()

        with pytest.raises(MissingIdentity):
            await resolve_lead(session, email, phone)

        session.execute.assert_not_awaited()


class TestTieBreak:
    async def test_row_matching_both_keys_wins(self, session, add_leads):
        await add_leads(
            Lead(external_lead_id="EMAIL_ONLY", email="a@x.com", phone="999", created_time=300),
            Lead(external_lead_id="BOTH", email="a@x.com", phone="111", created_time=100),
            Lead(external_lead_id="PHONE_ONLY", email="b@x.com", phone="111", created_time=200),
        )

        lead = await resolve_lead(session, "a@x.com", "111")

        assert lead.external_lead_id == "BOTH"

    async def test_most_recent_lead_wins_otherwise(self, session, add_leads):
        await add_leads(
            Lead(external_lead_id="OLD", email="a@x.com", created_time=100),
            Lead(external_lead_id="UNDATED", email="a@x.com", created_time=None),
            Lead(external_lead_id="NEW", email="A@x.com", created_time=200),
        )

        lead = await resolve_lead(session, "a@x.com", None)

        assert lead.external_lead_id == "NEW"

    async def test_lead_id_breaks_remaining_ties(self, session, add_leads):
        await add_leads(
            Lead(external_lead_id="B", phone="111"),
            Lead(external_lead_id="A", phone="111"),
        )

        lead = await resolve_lead(session, None, "111")

        assert lead.external_lead_id == "A"


async def test_store_failure_is_wrapped():
    session = AsyncMock()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

    with pytest.raises(StoreError):
        await resolve_lead(session, "a@x.com", None)


async def test_stored_email_with_surrounding_spaces_matches(session, add_leads):
    await add_leads(Lead(external_lead_id="L1", email="  A@X.com "))

    lead = await resolve_lead(session, "a@x.com", None)

    assert lead.external_lead_id == "L1"
