"""Command line decoder for single characteristic values.

Usage:
    gattprofiles <profile> <hex payload> [--log-level LEVEL]

Example:
    gattprofiles rscs "06 00 02 50 64 00"

The log level defaults to WARNING and can be set through the
GATTPROFILES_LOG_LEVEL environment variable or --log-level.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from pprint import pformat
from typing import Any

from . import __version__
from .exceptions import GattDecodeError
from .profile import (
    parse_alert_level,
    parse_battery_level,
    parse_blood_pressure_measurement,
    parse_cgm_features,
    parse_cgm_measurement,
    parse_cgm_specific_ops_control_point,
    parse_cgm_status,
    parse_glucose_measurement,
    parse_glucose_measurement_context,
    parse_heart_rate_measurement,
    parse_intermediate_cuff_pressure,
    parse_record_access_control_point,
    parse_rscs_measurement,
    parse_temperature_measurement,
)
from .protocol.data import ByteData

_LOGGER = logging.getLogger(__name__)

LOG_LEVEL_ENVIRONMENT_VARIABLE = "GATTPROFILES_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

PROFILES: Mapping[str, Callable[[ByteData], Any]] = {
    "cgm-feature": parse_cgm_features,
    "cgm-status": parse_cgm_status,
    "cgm-measurement": parse_cgm_measurement,
    "cgm-ops": parse_cgm_specific_ops_control_point,
    "gls-measurement": parse_glucose_measurement,
    "gls-context": parse_glucose_measurement_context,
    "racp": parse_record_access_control_point,
    "rscs": parse_rscs_measurement,
    "bps": parse_blood_pressure_measurement,
    "icp": parse_intermediate_cuff_pressure,
    "hrs": parse_heart_rate_measurement,
    "hts": parse_temperature_measurement,
    "battery": parse_battery_level,
    "alert": parse_alert_level,
}


def _hex_payload(value: str) -> ByteData:
    try:
        return ByteData.from_hex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid hex payload: {value!r}") from e


def decode(profile: str, payload: ByteData) -> Any:
    """Decode payload with the parser registered for profile.

    Raises:
        ValueError: If profile is unknown
        GattDecodeError: If the payload cannot be decoded
    """
    parser = PROFILES.get(profile)
    if parser is None:
        raise ValueError(f"Unknown profile {profile!r}, expected one of: {', '.join(PROFILES)}")

    result = parser(payload)
    if result is None:
        raise GattDecodeError(f"Cannot decode {profile} payload {payload.value.hex(' ')}")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gattprofiles", description="Decode a Bluetooth GATT characteristic value.")
    parser.add_argument("profile", choices=sorted(PROFILES), help="Characteristic to decode the payload as.")
    parser.add_argument("payload", type=_hex_payload, help="Characteristic value as hex (spaces and ':' allowed).")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENVIRONMENT_VARIABLE, DEFAULT_LOG_LEVEL),
        choices=LOG_LEVELS,
        type=str.upper,
        help=f"Logging level (default: ${LOG_LEVEL_ENVIRONMENT_VARIABLE} or {DEFAULT_LOG_LEVEL}).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # argparse does not check choices against a default taken from the environment
    if args.log_level not in LOG_LEVELS:
        parser.error(
            f"invalid {LOG_LEVEL_ENVIRONMENT_VARIABLE} value {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})"
        )

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        result = decode(args.profile, args.payload)
    except GattDecodeError as e:
        _LOGGER.debug("Decode failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if isinstance(result, list):
        for index, record in enumerate(result):
            print(f"[{index}] {pformat(record)}")
    else:
        print(pformat(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
