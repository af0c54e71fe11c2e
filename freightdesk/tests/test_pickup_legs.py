import pytest
from datetime import datetime, timezone

from freightdesk.services.pickup_legs import dump_legs, load_legs, new_leg, sign_pickup
from freightdesk.schemas.delivery_note import GeoLocation, PickupOrigin, PickupOriginCreate, SignLegPayload
from freightdesk.core.enums import LegStatus
from freightdesk.core.errors import AlreadySigned, MissingSignature

NOW = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


class TestPickupLeg:

    def test_new_leg_is_pending(self):
        leg = new_leg(PickupOriginCreate(name=" Almacen Norte ", address="  "))
        assert leg.status == LegStatus.PENDING
        assert leg.name == "Almacen Norte"
        assert leg.address is None

    def test_sign_completes_leg(self):
        leg = new_leg(PickupOriginCreate(name="Almacen"))
        payload = SignLegPayload(signature="data:image/png;base64,AAA", signer_name="Ana", quantity="3 palets")

        signed = sign_pickup(leg, payload, NOW)

        assert signed.status == LegStatus.COMPLETED
        assert signed.signed_at == NOW
        assert signed.signer_name == "Ana"
        assert leg.status == LegStatus.PENDING

    def test_incidence_marks_problem(self):
        leg = new_leg(PickupOriginCreate(name="Almacen"))
        signed = sign_pickup(leg, SignLegPayload(signature="sig", incidence="dañado"), NOW)
        assert signed.status == LegStatus.PROBLEM
        assert signed.incidence == "dañado"

    def test_blank_incidence_is_not_a_problem(self):
        leg = new_leg(PickupOriginCreate(name="Almacen"))
        signed = sign_pickup(leg, SignLegPayload(signature="sig", incidence="   "), NOW)
        assert signed.status == LegStatus.COMPLETED
        assert signed.incidence is None

    @pytest.mark.parametrize("signature", [None, "", "   "])
    def test_signature_required(self, signature):
        leg = new_leg(PickupOriginCreate(name="Almacen"))
        with pytest.raises(MissingSignature):
            sign_pickup(leg, SignLegPayload(signature=signature), NOW)

    @pytest.mark.parametrize("status", [LegStatus.COMPLETED, LegStatus.PROBLEM])
    def test_terminal_legs_cannot_be_signed_again(self, status):
        leg = PickupOrigin(name="Almacen", status=status, signature="old")
        with pytest.raises(AlreadySigned):
            sign_pickup(leg, SignLegPayload(signature="new"), NOW)
        with pytest.raises(AlreadySigned):
            sign_pickup(leg, SignLegPayload(), NOW)

    def test_legs_stored_with_camel_case_keys(self):
        leg = sign_pickup(
            new_leg(PickupOriginCreate(name="Almacen")),
            SignLegPayload(signature="sig", signer_name="Ana", geo_location=GeoLocation(lat=40.1, lng=-3.5)),
            NOW,
        )
        raw = dump_legs([leg])

        assert raw[0]["signerName"] == "Ana"
        assert raw[0]["geoLocation"] == {"lat": 40.1, "lng": -3.5}
        assert raw[0]["status"] == "completed"
        assert "incidence" not in raw[0]

        loaded = load_legs(raw)
        assert loaded[0].signed_at == NOW
        assert loaded[0].status == LegStatus.COMPLETED

    def test_load_legs_handles_empty(self):
        assert load_legs(None) == []
