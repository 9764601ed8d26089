#!/usr/bin/env python3
"""
medinventory-add

Purpose:
  Register a medical device with a running inventory service and attach photos.
  - POST /devices with the device fields.
  - POST /upload once per --image file.
  - PUT /devices/<id> with the uploaded paths; the service merges them into
    the device's existing images.

Base URL precedence:
  1) --base-url (CLI)
  2) env MEDINVENTORY_URL
  3) DEFAULT_BASE_URL

Examples:
  medinventory-add "Infusion Pump" --manufacturer B.Braun --model Infusomat
  medinventory-add "Patient Monitor" -m Philips --model MX450 --location ICU --image front.jpg --image back.jpg

Exit codes:
  0 = success
  1 = handled application error
  2 = network/HTTP error
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

DEFAULT_BASE_URL = "http://localhost:8089"

# CLI option -> document key
FIELD_OPTIONS = {
    "serial": "SerialNumber",
    "manufacturer": "Manufacturer",
    "model": "Model",
    "country": "CountryOfOrigin",
    "category": "DeviceCategory",
    "location": "DeviceLocation",
    "supplier": "Supplier",
    "status": "DeviceStatus",
    "warranty": "WarrantyPeriod",
    "details": "Details",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Add a medical device to the inventory service and upload its photos.")
    p.add_argument("name", help="Device name (e.g. 'Infusion Pump').")
    p.add_argument("-m", "--manufacturer", required=True, help="Manufacturer (required).")
    p.add_argument("--model", required=True, help="Model (required).")
    p.add_argument("--serial", help="Serial number.")
    p.add_argument("--country", help="Country of origin.")
    p.add_argument("--category", help="Device category.")
    p.add_argument("--location", help="Device location (ward, room).")
    p.add_argument("--supplier", help="Supplier.")
    p.add_argument("--status", help="Device status, e.g. Operational.")
    p.add_argument("--warranty", help="Warranty period.")
    p.add_argument("--details", help="Free-form details.")
    p.add_argument("-i", "--image", action="append", default=[], type=Path,
                   help="Image file to attach; repeat for several.")
    p.add_argument("--base-url", default=None,
                   help=f"Service base URL (default: env MEDINVENTORY_URL or {DEFAULT_BASE_URL})")
    p.add_argument("--timeout", type=float, default=15.0,
                   help="HTTP timeout in seconds (default: 15)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Verbose logging to stderr.")
    return p.parse_args(argv)


def resolve_base_url(cli_value: Optional[str]) -> str:
    return (cli_value or os.getenv("MEDINVENTORY_URL") or DEFAULT_BASE_URL).rstrip("/")


def build_payload(args: argparse.Namespace) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"DeviceName": args.name}
    for option, key in FIELD_OPTIONS.items():
        value = getattr(args, option)
        if value:
            payload[key] = value
    return payload


def vprint(enabled: bool, *args: Any) -> None:
    if enabled:
        print(*args, file=sys.stderr)


def _raise_for_status(r: requests.Response, action: str) -> None:
    if r.ok:
        return
    try:
        detail = r.json().get("message") or r.text
    except ValueError:
        detail = r.text
    raise requests.HTTPError(f"{action} failed ({r.status_code}): {detail}", response=r)


def api_create_device(session: requests.Session, base_url: str, payload: Dict[str, Any],
                      timeout: float, verbose: bool) -> int:
    url = f"{base_url}/devices"
    vprint(verbose, f"POST {url} json={payload}")
    r = session.post(url, json=payload, timeout=timeout)
    _raise_for_status(r, "Create")
    sequence_number = r.json().get("SequenceNumber")
    if sequence_number is None:
        raise ValueError("Service did not report the new device's SequenceNumber")
    return int(sequence_number)


def api_upload_image(session: requests.Session, base_url: str, device_id: int, image: Path,
                     timeout: float, verbose: bool) -> str:
    url = f"{base_url}/upload"
    vprint(verbose, f"POST {url} deviceId={device_id} file={image}")
    with image.open("rb") as fh:
        r = session.post(url, data={"deviceId": str(device_id)}, files={"file": (image.name, fh)}, timeout=timeout)
    _raise_for_status(r, f"Upload of {image.name}")
    return r.json()["filePath"]


def api_attach_images(session: requests.Session, base_url: str, device_id: int, paths: List[str],
                      timeout: float, verbose: bool) -> None:
    url = f"{base_url}/devices/{device_id}"
    vprint(verbose, f"PUT {url} ImageUrls={paths}")
    r = session.put(url, json={"ImageUrls": paths}, timeout=timeout)
    _raise_for_status(r, "Attach images")


def main(argv: Optional[List[str]] = None, session: Optional[requests.Session] = None) -> int:
    args = parse_args(argv)
    base_url = resolve_base_url(args.base_url)
    session = session or requests.Session()

    try:
        missing = [str(p) for p in args.image if not p.is_file()]
        if missing:
            raise ValueError(f"Image file(s) not found: {', '.join(missing)}")

        device_id = api_create_device(session, base_url, build_payload(args), args.timeout, args.verbose)
        paths = [api_upload_image(session, base_url, device_id, image, args.timeout, args.verbose)
                 for image in args.image]
        if paths:
            api_attach_images(session, base_url, device_id, paths, args.timeout, args.verbose)

        print(json.dumps({
            "status": "created",
            "SequenceNumber": device_id,
            "ImageUrls": paths,
        }, indent=2))
        return 0

    except requests.exceptions.RequestException as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
