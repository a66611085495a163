"""
Client for the university's public unit outline web service.

The service is an OutSystems application. Fetching an outline takes three
calls: look up the unit's internal code/version, find the availability
(campus offering) for the semester, then request the outline itself.
Requests must carry a module version token and a per-endpoint API version.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

import requests

from .cache import LookupCache
from .models import UnitOutline

logger = logging.getLogger(__name__)

BASE_URL = "https://curtin.outsystems.app/UnitOutlineBuilder"
SCREEN_SERVICES = "screenservices/UnitOutlineBuilder/Public/OutlineHub"
DEFAULT_CAMPUS = "Bentley Perth"
REQUEST_TIMEOUT = 30

# Per-endpoint API version tokens; a mismatched token returns no data
API_VERSIONS = {
    "ScreenDataSetGetFilterUnit": "axSR8n8P8MsJ41MrNViNvg",
    "DataActionGetAvailabilities": "igu7+gCJcnPAU_YQy5dB4g",
    "ScreenDataSetGetNew": "aDiUvMK2z_RjPnvHmPq_Wg",
}

_INT_MIN = -2147483648
_NULL_DATE = "1900-01-01T00:00:00"

# Shape of an empty VW_OS_UNIT row, required by the screen's ExtractedAvails list
_AVAIL_INT_FIELDS = (
    "UNIT_CD", "UNIT_VERS", "AVAILABLE_YEAR", "FACULTY_DATA_YEAR", "AREA_DATA_YEAR",
    "AVAIL_KEY_NO", "AVAIL_NO", "AVAIL_YEAR", "AVAIL_CURR_NO_ENROLLED",
    "AVAIL_ATT_MODE_AVAIL_KEY_NO",
)
_AVAIL_DATE_FIELDS = (
    "CREATED_DATE", "CHANGED_DATE", "EFFECTIVE_DATE", "DEACTIVATION_DATE",
    "FACULTY_CREATED_DATE", "FACULTY_CHANGED_DATE", "AREA_CREATED_DATE",
    "AREA_CHANGED_DATE", "AVAIL_START_DATE", "AVAIL_END_DATE", "AVAIL_CREATED_DATE",
    "AVAIL_CHANGE_DATE", "AVAIL_ATT_CREATED_DATE", "AVAIL_ATT_CHANGED_DATE",
)
_AVAIL_TEXT_FIELDS = (
    "FULL_TITLE", "ABBREV_TITLE", "STAGE", "UNIT_LEVEL", "RESULT_TYPE", "COORDINATOR",
    "ADMIN_DETAILS", "OWNING_ORG_CD", "FACULTY_CD", "ACTIVE_FG", "STAGE_DESC",
    "SPK_CAT_CD", "UNIT_CD_UDC", "FACULTY_ORG_CODE", "FACULTY_ORG_NAME",
    "FACULTY_ORG_SHORT_NAME", "FACULTY_ORG_TYPE", "FACULTY_TOP_ORG_CODE",
    "FACULTY_TOP_ORG", "FACULTY_IS_CURRENT", "AREA_ORG_CODE", "AREA_ORG_NAME",
    "AREA_ORG_SHORT_NAME", "AREA_ORG_TYPE", "AREA_TOP_ORG_CODE", "AREA_TOP_ORG",
    "AREA_IS_CURRENT", "AVAIL_DESCRIPTION", "AVAIL_STUDYPERIOD_CD", "AVAIL_STUDY_PERIOD",
    "AVAIL_TO_STU_FG", "AVAIL_LOCATION_CD", "AVAIL_LOCATION", "AVAIL_ACTIVE_FG",
    "ATTNDC_MODE_CD", "ATTENDANCE_MODE", "HR_EMPLOYEE", "SURNAME", "TITLE",
    "FIRST_NAME", "PREFERRED_NAME",
)

EMPTY_AVAIL_ITEM = {
    **{name: _INT_MIN for name in _AVAIL_INT_FIELDS},
    **{name: _NULL_DATE for name in _AVAIL_DATE_FIELDS},
    **{name: "" for name in _AVAIL_TEXT_FIELDS},
    "CREDIT_VALUE": "-79228162514264337593543950335",
}

ANONYMOUS_CLIENT_VARIABLES = {
    "IsAllowedFlag_Expired": True, "IsUserAdmin": False, "RedirectTimer": 0,
    "UserPhotoURL": "", "IsUserStandard": False, "LastURL": "", "UserName": "",
    "IsAllowedFlag": False, "IsUserSchool": False, "IsUserLibrary": False,
    "CurtinID": "", "IsUserFaculty": False, "User_OS_id": "",
}


class OutlineApiError(RuntimeError):
    """Raised when the outline service fails or has no matching outline."""


def list_item(value: str = "") -> Dict[str, str]:
    """Dropdown list entry in the shape the service expects."""
    return {"Value": value, "Label": "", "ImageUrlOrIconClass": "", "GroupName": "", "Description": ""}


def build_request_body(module_version: str, api_version: str, variables: dict) -> dict:
    """Screen-service request body with the default screen variables filled in."""
    screen_variables = {
        "filterList_units": {"List": [], "EmptyListItem": list_item()},
        "selectionList_units": {"List": [], "EmptyListItem": list_item()},
        "filterList_avails": {"List": [], "EmptyListItem": list_item()},
        "selectionList_avails": {"List": [], "EmptyListItem": list_item()},
        "SelectedUnitCD": 0,
        "SelectedUnitVers": 0,
        "SelectedAvailKeyNo": 0,
        "SelectedAttcModeCD": "",
        "ResultFile": {"FileName": "", "File": None, "Link": ""},
        "legacyFilename": "",
        "IsLegacy": False,
        "IsDirectDownload": False,
        "IsDirectDwFailed": False,
        "IsDirectDwFetching": False,
        "ExtractedAvails": {"List": [], "EmptyListItem": EMPTY_AVAIL_ITEM},
        "IsSearchingAvails": False,
        "GUID": "",
        "_gUIDInDataFetchStatus": 1,
        "unitcd": 0,
        "_unitcdInDataFetchStatus": 1,
        "availcd": 0,
        "_availcdInDataFetchStatus": 1,
        "GetSettings": {"CutDate": "2024-09-27", "IsTodayBeforeCutDate": False, "DataFetchStatus": 1},
    }
    screen_variables.update(variables)
    return {
        "versionInfo": {"moduleVersion": module_version, "apiVersion": api_version},
        "viewName": "Public.OutlineHub",
        "screenData": {"variables": screen_variables},
        "inputParameters": {},
        "clientVariables": ANONYMOUS_CLIENT_VARIABLES,
    }


class OutlineClient:
    """Fetches unit outlines from the outline web service."""

    def __init__(self, session: Optional[requests.Session] = None,
                 lookup_cache: Optional[LookupCache] = None,
                 base_url: str = BASE_URL, campus: str = DEFAULT_CAMPUS):
        """Initialize client.

        Args:
            session: HTTP session (a new requests.Session by default)
            lookup_cache: Cache for the unit table and module version token;
                share one instance between clients to reuse lookups
            base_url: Service root URL
            campus: Campus name used to pick the offering
        """
        self.session = session or requests.Session()
        self.cache = lookup_cache or LookupCache()
        self.base_url = base_url.rstrip("/")
        self.campus = campus

    def _post(self, endpoint: str, body: dict) -> dict:
        url = f"{self.base_url}/{SCREEN_SERVICES}/{endpoint}"
        try:
            response = self.session.post(
                url,
                json=body,
                headers={"Referer": f"{self.base_url}/OutlineHub"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise OutlineApiError(f"Outline service request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise OutlineApiError(f"Outline service returned invalid JSON from {endpoint}") from e

    def fetch_module_version(self) -> str:
        """Current module version token (cached for five minutes)."""
        return self.cache.module_version.get_or_fetch(self._request_module_version)

    def _request_module_version(self) -> str:
        url = f"{self.base_url}/moduleservices/moduleversioninfo"
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()["versionToken"]
        except requests.RequestException as e:
            raise OutlineApiError(f"Could not reach the outline service: {e}") from e
        except (ValueError, KeyError) as e:
            raise OutlineApiError("Outline service returned no module version") from e

    def get_unit_lookup(self) -> Dict[str, Tuple[int, int]]:
        """Unit code -> (internal code, version), cached for 30 days."""
        return self.cache.unit_lookup.get_or_fetch(self._request_unit_lookup)

    def _request_unit_lookup(self) -> Dict[str, Tuple[int, int]]:
        body = build_request_body(self.fetch_module_version(),
                                  API_VERSIONS["ScreenDataSetGetFilterUnit"], {})
        data = self._post("ScreenDataSetGetFilterUnit", body)
        rows = ((data.get("data") or {}).get("List") or {}).get("List") or []

        lookup = {}
        for row in rows:
            unit = (row or {}).get("VW_OS_UNIT") or {}
            code = (unit.get("UNIT_CD_UDC") or "").strip().upper()
            if not code or code.isdigit():
                continue
            lookup[code] = (unit["UNIT_CD"], unit["UNIT_VERS"])
        logger.info("Loaded %d units from the outline service", len(lookup))
        return lookup

    def get_availability(self, semester: int, year: int, unit_cd: int,
                         unit_vers: int) -> Tuple[str, List[dict]]:
        """Availability value for the campus offering in the given semester.

        Returns:
            (selected availability value, all availability entries)

        Raises:
            OutlineApiError: If the unit is not offered that semester
        """
        body = build_request_body(
            self.fetch_module_version(),
            API_VERSIONS["DataActionGetAvailabilities"],
            {"IsSearchingAvails": True, "SelectedUnitCD": unit_cd, "SelectedUnitVers": unit_vers},
        )
        data = self._post("DataActionGetAvailabilities", body)
        entries = ((data.get("data") or {}).get("Avails_dd") or {}).get("List") or []

        for entry in entries:
            label = entry.get("Label") or ""
            if self.campus not in label:
                continue
            match = re.search(r"(\d{4})\s+Semester\s+(\d)", label)
            if match and int(match.group(1)) == year and int(match.group(2)) == semester:
                return entry["Value"], entries

        raise OutlineApiError(
            f"No {self.campus} offering found for Semester {semester} {year}; "
            "the semester may not be published yet"
        )

    def fetch_outline(self, unit_code: str, semester: int, year: int) -> UnitOutline:
        """Fetch the outline payload for one unit offering.

        Args:
            unit_code: Unit code, e.g. "COMP1005"
            semester: 1 or 2
            year: Academic year

        Returns:
            UnitOutline with the assessment listing and program calendar

        Raises:
            OutlineApiError: On HTTP failure or when the unit/offering does not exist
        """
        code = unit_code.strip().upper()
        lookup = self.get_unit_lookup()
        if code not in lookup:
            raise OutlineApiError(f'Unit "{code}" not found in the unit list')
        unit_cd, unit_vers = lookup[code]

        avail_value, avail_entries = self.get_availability(semester, year, unit_cd, unit_vers)
        avail_parts = avail_value.split(",")
        unit_value = f"{unit_cd},{unit_vers}"

        body = build_request_body(
            self.fetch_module_version(),
            API_VERSIONS["ScreenDataSetGetNew"],
            {
                "filterList_units": {"List": [list_item(f"{cd},{vers}") for cd, vers in lookup.values()]},
                "selectionList_units": {"List": [list_item(unit_value)]},
                "filterList_avails": {"List": [list_item(e.get("Value", "")) for e in avail_entries]},
                "selectionList_avails": {"List": [list_item(avail_value)]},
                "SelectedUnitCD": unit_cd,
                "SelectedUnitVers": unit_vers,
                "SelectedAvailKeyNo": int(avail_parts[0]),
                "SelectedAttcModeCD": avail_parts[1] if len(avail_parts) > 1 else "INT",
            },
        )
        data = self._post("ScreenDataSetGetNew", body)

        if data.get("hasModuleVersionChanged") or data.get("hasApiVersionChanged"):
            logger.warning("Outline service reports a version change; API_VERSIONS may need updating")

        rows = ((data.get("data") or {}).get("List") or {}).get("List") or []
        payload = (rows[0] or {}).get("UobOutline") if rows else None
        if not payload:
            raise OutlineApiError(
                f"No outline found for {code} Semester {semester} {year} at {self.campus}"
            )

        return UnitOutline(
            unit_code=payload.get("UnitNumber") or code,
            title=payload.get("Title") or "",
            study_period=payload.get("Avail_Study_Period") or "",
            year=str(payload.get("Avail_Year") or year),
            as_task=payload.get("AS_TASK") or "",
            pc_text=payload.get("PC_TEXT") or "",
            raw=payload,
        )
