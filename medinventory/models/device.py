"""The device record: the only entity the inventory keeps.

Python code uses snake_case attributes while the persisted ``MDDB.json``
document and the JSON API keep the PascalCase keys hospital staff already
know from the spreadsheet the data was imported from. Aliases bridge the two.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_FIELDS: tuple[str, ...] = ("DeviceName", "Manufacturer", "Model")

# Fields whose distinct values feed the list filters and form dropdowns.
DISTINCT_FIELDS: dict[str, str] = {
    "DeviceCategory": "device_category",
    "DeviceLocation": "device_location",
    "Manufacturer": "manufacturer",
}

# Searched (case-insensitively) by the list view's free-text box.
SEARCHABLE_FIELDS: tuple[str, ...] = ("device_name", "serial_number", "manufacturer", "model")

DEVICE_STATUS_CHOICES: tuple[str, ...] = ("Operational", "Under Maintenance", "Faulty", "Retired")


class DeviceRecord(BaseModel):
    """One medical device as persisted in the collection document.

    ``DeviceName``, ``Manufacturer`` and ``Model`` are enforced on insert and
    replace rather than here, so legacy documents with gaps still load.
    Keys this model does not know are kept and written back untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sequence_number: Optional[int] = Field(default=None, alias="SequenceNumber")
    device_name: Optional[str] = Field(default=None, alias="DeviceName")
    serial_number: Optional[str] = Field(default=None, alias="SerialNumber")
    manufacturer: Optional[str] = Field(default=None, alias="Manufacturer")
    model: Optional[str] = Field(default=None, alias="Model")
    country_of_origin: Optional[str] = Field(default=None, alias="CountryOfOrigin")
    device_category: Optional[str] = Field(default=None, alias="DeviceCategory")
    device_location: Optional[str] = Field(default=None, alias="DeviceLocation")
    supplier: Optional[str] = Field(default=None, alias="Supplier")
    itm: Optional[Union[int, str]] = Field(default=None, alias="ITM")
    accessories: Optional[str] = Field(default=None, alias="Accessories")
    details: Optional[str] = Field(default=None, alias="Details")
    warranty_period: Optional[str] = Field(default=None, alias="WarrantyPeriod")
    recipient_name: Optional[str] = Field(default=None, alias="RecipientName")
    commissioning_date: Optional[str] = Field(default=None, alias="CommissioningDate")
    device_status: Optional[str] = Field(default=None, alias="DeviceStatus")
    receipt_form_number: Optional[str] = Field(default=None, alias="ReceiptFormNumber")
    image_urls: Optional[list[str]] = Field(default=None, alias="ImageUrls")

    def to_document(self) -> dict:
        """Serialize with the PascalCase keys used on disk and over HTTP."""
        return self.model_dump(by_alias=True)


# Alias (PascalCase) -> attribute name, for code that works with raw payloads.
FIELD_ATTRIBUTES: dict[str, str] = {
    field.alias: name for name, field in DeviceRecord.model_fields.items() if field.alias
}
