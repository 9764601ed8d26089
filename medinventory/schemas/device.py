from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DevicePayload(BaseModel):
    """Inbound device body.

    Every field is optional at the schema level: missing required values are
    reported by the repository's presence check so the client gets a single
    human-readable 400 instead of a schema error per field. Unknown keys are
    ignored so older clients with stale fields do not break.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

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

    def changes(self) -> dict:
        """Only the keys the client actually sent, PascalCase."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class DeviceCreate(DevicePayload):
    pass


class DeviceUpdate(DevicePayload):
    pass


class MessageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    sequence_number: Optional[int] = Field(default=None, alias="SequenceNumber")


class UploadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    file_path: str = Field(alias="filePath")


class DeviceOptions(BaseModel):
    categories: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    manufacturers: list[str] = Field(default_factory=list)
