from enum import Enum


class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self):
        return self.value


class PricingSource(str, Enum):
    ZONE_RULE = "zone_rule"
    VEHICLE_RATE = "vehicle_rate"

    def __str__(self):
        return self.value


class LegStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    PROBLEM = "problem"

    def __str__(self):
        return self.value


class NoteShape(str, Enum):
    SINGLE = "single"
    ORIGIN_DESTINATION = "origin_destination"
    MULTI_PICKUP = "multi_pickup"

    def __str__(self):
        return self.value


class NoteStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CALCULATE_QUOTE = "calculate_quote"
    UPDATE_QUOTE_STATUS = "update_quote_status"
    CREATE_VEHICLE_TYPE = "create_vehicle_type"
    UPDATE_VEHICLE_TYPE = "update_vehicle_type"
    DEACTIVATE_VEHICLE_TYPE = "deactivate_vehicle_type"
    CREATE_PRICING_RULE = "create_pricing_rule"
    UPDATE_PRICING_RULE = "update_pricing_rule"
    DELETE_PRICING_RULE = "delete_pricing_rule"
    CREATE_DELIVERY_NOTE = "create_delivery_note"
    SIGN_PICKUP = "sign_pickup"
    RECORD_PROOF = "record_proof"
    SIGN_DESTINATION = "sign_destination"
    SOFT_DELETE_NOTE = "soft_delete_note"
    RESTORE_NOTE = "restore_note"
    PURGE_NOTE = "purge_note"

    def __str__(self):
        return self.value
