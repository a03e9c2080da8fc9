"""
Declarative section schemas.

Each section lists its canonical fields, where they may live inside a
remote record (including every historical spelling), how they are named
in the write payload, and which of them must be filled before saving.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from inspection_sync.schema.models import SectionKind


class FieldKind(str, Enum):
    """Value type of a canonical field; decides its empty value."""

    TEXT = "text"  # ""
    YES_NO = "yes_no"  # "Yes" | "No" | ""
    CHOICE = "choice"  # one of FieldSpec.choices | ""
    CHOICE_LIST = "choice_list"  # list of FieldSpec.choices
    FLAG = "flag"  # "Yes" | "No" | "", reported as a boolean
    ASSET = "asset"  # None | uri
    ASSET_LIST = "asset_list"  # fixed slots of None | uri


SELECT_KINDS = (FieldKind.YES_NO, FieldKind.CHOICE, FieldKind.CHOICE_LIST, FieldKind.FLAG)


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field of a section."""

    name: str
    label: str
    kind: FieldKind = FieldKind.YES_NO
    group: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    required: bool = False
    required_message: str | None = None
    upload_name: str | None = None  # "{index}" is 1-based for lists and entries
    slots: int = 0
    report_default: str = ""
    depends_on: str | None = None  # only reported when that field is "Yes"
    also_in: tuple[str, ...] = ()  # extra groups searched when hydrating
    group_only: bool = False  # never fall back to the section root when hydrating
    choices: tuple[str, ...] = ()
    # (substring, choice) pairs tried in order once no choice matches exactly
    choice_hints: tuple[tuple[str, str], ...] = ()
    choice_fallback: str = ""
    # (field, values): required and reported only while that field holds one of values
    applies_when: tuple[str, tuple[str, ...]] | None = None

    @property
    def keys(self) -> tuple[str, ...]:
        """Remote spellings in priority order, canonical label first."""
        return (self.label, *self.aliases)

    @property
    def is_asset(self) -> bool:
        return self.kind in (FieldKind.ASSET, FieldKind.ASSET_LIST)

    def empty_value(self):
        if self.kind == FieldKind.ASSET:
            return None
        if self.kind == FieldKind.ASSET_LIST:
            return [None] * self.slots
        if self.kind == FieldKind.CHOICE_LIST:
            return []
        return ""

    def applies(self, values: Mapping[str, Any]) -> bool:
        if self.applies_when is None:
            return True
        name, accepted = self.applies_when
        return (values.get(name) or "") in accepted

    def missing_message(self) -> str:
        if self.required_message:
            return self.required_message
        if self.kind in SELECT_KINDS:
            return f"Select {self.label}"
        if self.kind == FieldKind.TEXT:
            return f"Enter {self.label}."
        return f"Add {self.label}."


@dataclass(frozen=True)
class EntryRule:
    """If ``when`` is filled on an entry, ``then`` must be filled too."""

    when: str
    then: str
    message: str


@dataclass(frozen=True)
class EntrySpec:
    """Repeatable rows inside a section."""

    path: tuple[str, ...]
    report_key: str
    fields: tuple[FieldSpec, ...]
    min_filled_message: str | None = None
    rules: tuple[EntryRule, ...] = ()


@dataclass(frozen=True)
class SectionSchema:
    """Everything the engine needs to hydrate, edit and submit a section.

    A section without a ``write_endpoint`` is kept as a local draft only.
    Detail endpoints are tried in order until one carries the section.
    """

    kind: SectionKind
    detail_endpoint: str
    write_endpoint: str | None
    section_keys: tuple[str, ...]
    fields: tuple[FieldSpec, ...] = ()
    group_aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)
    entry: EntrySpec | None = None
    deleted_files_keys: tuple[str, ...] = ()
    fallback_detail_endpoints: tuple[str, ...] = ()
    section_unwrap: tuple[str, ...] = ()  # wrapper keys stripped after locating the section
    json_payload: bool = False  # JSON body instead of a multipart form

    @property
    def is_repeatable(self) -> bool:
        return self.entry is not None

    @property
    def is_submittable(self) -> bool:
        return self.write_endpoint is not None

    @property
    def detail_endpoints(self) -> tuple[str, ...]:
        return (self.detail_endpoint, *self.fallback_detail_endpoints)

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        if self.entry is not None:
            for spec in self.entry.fields:
                if spec.name == name:
                    return spec
        raise KeyError(f"{self.kind.value} has no field {name!r}")

    def aliases_for_group(self, group: str) -> tuple[str, ...]:
        return (group, *self.group_aliases.get(group, ()))

    def empty_values(self) -> dict:
        return {spec.name: spec.empty_value() for spec in self.fields}

    def empty_entry_values(self) -> dict:
        if self.entry is None:
            return {}
        return {spec.name: spec.empty_value() for spec in self.entry.fields}


def _yn(name: str, label: str, group: tuple[str, ...] = (), *aliases: str) -> FieldSpec:
    return FieldSpec(name=name, label=label, group=group, aliases=aliases, required=True)

WORKING = ("working",)
NOISE = ("noise/leakage",)
PROPER = ("proper_condition",)
FRONT = ("Any Damage In", "Front")
PILLARS = ("Any Damage In", "Pillars")
REAR = ("Any Damage In", "Rear")

ENGINE_SCHEMA = SectionSchema(
    kind=SectionKind.ENGINE,
    detail_endpoint="/api/view-inspection",
    write_endpoint="/api/add-engine-inspection",
    section_keys=("engine", "Engine", "engineInspection", "EngineInspection"),
    group_aliases={
        "working": ("Working", "working "),
        "noise/leakage": ("noiseLeakage", "noise"),
    },
    fields=(
        _yn("engine_working", "Engine", WORKING),
        _yn("radiator", "Radiator", WORKING),
        _yn("silencer", "Silencer", WORKING),
        _yn("starter_motor", "Starter Motor", WORKING),
        _yn("engine_oil_level", "Engine Oil Level", WORKING),
        _yn("coolant_availability", "Coolant Availability", WORKING),
        _yn("engine_mounting", "Engine Mounting", WORKING),
        _yn("battery", "Battery", WORKING),
        _yn("engine_oil_leakage", "Engine Oil Leakage", NOISE),
        _yn("coolant_oil_leakage", "Coolant Oil Leakage", NOISE),
        _yn("abnormal_noise", "Abnormal Noise", NOISE),
        FieldSpec(
            name="black_smoke",
            label="Black Smoke/White Smoke",
            group=NOISE,
            aliases=("Black Smoke / White Smoke",),
            required=True,
            required_message="Select Black Smoke / White Smoke",
        ),
        _yn("defective_belts", "Defective Belts", NOISE),
        FieldSpec(
            name="engine_cost",
            label="Refurbishment Cost",
            kind=FieldKind.TEXT,
            group=WORKING,
            required=True,
            required_message="Enter engine refurbishment cost.",
            report_default="0",
        ),
        FieldSpec(
            name="engine_image",
            label="Engine image",
            kind=FieldKind.ASSET,
            group=WORKING,
            aliases=("Engine Image", "engineImage", "image"),
            required=True,
            required_message="Add engine image.",
            upload_name="engine",
        ),
        FieldSpec(
            name="highlight_positives",
            label="Highlight Positives",
            kind=FieldKind.TEXT,
            group=NOISE,
            aliases=("highlightPositives",),
        ),
        FieldSpec(
            name="other_comments",
            label="Other Comments",
            kind=FieldKind.TEXT,
            group=NOISE,
            aliases=("otherComments",),
        ),
        FieldSpec(
            name="refurb_cost_total",
            label="Refurbishment Cost (Total)",
            kind=FieldKind.TEXT,
            aliases=("refurbishmentCostTotal", "RefurbishmentCostTotal"),
            report_default="0",
        ),
    ),
)

FUNCTIONS_SCHEMA = SectionSchema(
    kind=SectionKind.FUNCTIONS,
    detail_endpoint="/api/view-inspection",
    write_endpoint="/api/add-functions-inspection",
    section_keys=("functions", "Functions"),
    group_aliases={
        "proper_condition": ("proper_condition ", "properCondition"),
        "noise/leakage": ("noiseLeakage", "noise", "Noise"),
    },
    fields=(
        _yn("steering", "Steering", PROPER, "steering"),
        _yn("suspension", "Suspension", PROPER, "suspension"),
        _yn("brake", "Brake", PROPER, "brake"),
        _yn("gear_shifting", "Gear Shifting", PROPER, "gearShifting"),
        _yn("drive_shaft", "Drive Shaft/ Axle", PROPER, "Drive Shaft", "driveShaft"),
        _yn("clutch", "Clutch", PROPER, "clutch"),
        _yn("wheel_bearing_noise", "Wheel Bearing Noise", NOISE, "wheelBearingNoise"),
        _yn("gear_box_noise", "Gear Box Noise", NOISE, "gearBoxNoise"),
        _yn(
            "transmission_leakage",
            "Transmission/ Differential Oil Leakage",
            NOISE,
            "transmissionLeakage",
        ),
        _yn("differential_noise", "Differential Noise", NOISE, "differentialNoise"),
        FieldSpec(name="highlight_positives", label="Highlight Positives", kind=FieldKind.TEXT),
        FieldSpec(name="other_comments", label="Other Comments", kind=FieldKind.TEXT),
        FieldSpec(
            name="refurb_cost",
            label="Refurbishment Cost",
            kind=FieldKind.TEXT,
            aliases=("refurbCost", "refurbishmentCost"),
            report_default="0",
        ),
    ),
)


def _pillar_detail(name: str, label: str, depends_on: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=FieldKind.TEXT,
        group=PILLARS,
        depends_on=depends_on,
        report_default="Already Repaired",
    )


def _rear_detail(name: str, label: str, depends_on: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=FieldKind.TEXT,
        group=REAR,
        depends_on=depends_on,
        report_default="Already Repaired",
    )


FRAMES_SCHEMA = SectionSchema(
    kind=SectionKind.FRAMES,
    detail_endpoint="/api/view-inspection",
    write_endpoint="/api/add-frames-inspection",
    section_keys=("frames", "Frames"),
    group_aliases={
        "Any Damage In": ("Any damage in", "anyDamageIn", "anyDamage"),
        "Front": ("front",),
        "Pillars": ("pillars",),
        "Rear": ("rear",),
    },
    fields=(
        _yn("bonnet_support", "Bonnet Support Member", FRONT, "Bonnet Support"),
        _yn("cross_member", "Cross Member", FRONT),
        _yn("lamp_support", "Lamp Support", FRONT),
        _yn("left_apron", "Left Apron", FRONT),
        _yn("right_apron", "Right Apron", FRONT),
        _yn("left_a_pillar", "Left A-Pillar", PILLARS),
        _yn("left_b_pillar", "Left B-Pillar", PILLARS),
        _pillar_detail("left_b_pillar_details", "Left B-Pillar Details", "left_b_pillar"),
        _yn("left_c_pillar", "Left C-Pillar", PILLARS),
        _pillar_detail("left_c_pillar_details", "Left C-Pillar Details", "left_c_pillar"),
        _yn("right_a_pillar", "Right A-Pillar", PILLARS),
        _yn("right_b_pillar", "Right B-Pillar", PILLARS),
        _pillar_detail("right_b_pillar_details", "Right B-Pillar Details", "right_b_pillar"),
        _yn("right_c_pillar", "Right C-Pillar", PILLARS),
        _yn("rear_left_quarter", "Rear Left Quarter Panel", REAR),
        _rear_detail(
            "rear_left_quarter_details", "Rear Left Quarter Panel Details", "rear_left_quarter"
        ),
        _yn("rear_right_quarter", "Rear Right Quarter Panel", REAR),
        _rear_detail(
            "rear_right_quarter_details", "Rear Right Quarter Panel Details", "rear_right_quarter"
        ),
        _yn("dickey", "Dickey", REAR),
        _rear_detail("dickey_details", "Dickey Details", "dickey"),
        FieldSpec(
            name="flood_affected",
            label="Flood Affected Vehicle",
            aliases=("floodAffected",),
            required=True,
            required_message="Select Flood Affected Vehicle.",
        ),
        FieldSpec(
            name="frame_images",
            label="Frame images",
            kind=FieldKind.ASSET_LIST,
            aliases=("frameImages", "images"),
            slots=4,
            required=True,
            required_message="Add at least one frame image.",
            upload_name="frame{index}",
        ),
        FieldSpec(name="other_comments", label="Other Comments", kind=FieldKind.TEXT),
        FieldSpec(
            name="refurb_cost",
            label="Refurbishment Cost",
            kind=FieldKind.TEXT,
            report_default="0",
        ),
    ),
)

DEFECTS_SCHEMA = SectionSchema(
    kind=SectionKind.DEFECTS,
    detail_endpoint="/api/view-defects-inspection",
    write_endpoint="/api/add-defect-inspection",
    section_keys=("DefectsReport", "defectsReport"),
    deleted_files_keys=("deletedFiles",),
    entry=EntrySpec(
        path=("Reports", "Report"),
        report_key="Report",
        fields=(
            FieldSpec(
                name="image",
                label="Defect image",
                kind=FieldKind.ASSET,
                aliases=("defectImage",),
                upload_name="defect[{index}]",
            ),
            FieldSpec(name="remark", label="Remark", kind=FieldKind.TEXT, aliases=("remark",)),
        ),
        min_filled_message="Add at least one defect image or remark.",
        rules=(EntryRule(when="image", then="remark", message="Add a remark for each image."),),
    ),
)

YES_NO_NA = ("Yes", "No", "N/A")
_NA_HINTS = (("n/a", "N/A"), ("not applicable", "N/A"))

AVAILABLE = ("available",)
ELECTRICAL_WORKING = ("working",)


def _yn_na(name: str, label: str, *aliases: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=FieldKind.CHOICE,
        aliases=aliases,
        also_in=("ac",),
        required=True,
        choices=YES_NO_NA,
        choice_hints=_NA_HINTS,
    )


ELECTRICAL_SCHEMA = SectionSchema(
    kind=SectionKind.ELECTRICAL,
    detail_endpoint="/api/view-inspection",
    write_endpoint="/api/add-electrical-and-interior-inspection",
    section_keys=(
        "interior",
        "Interior",
        "electrical",
        "Electrical",
        "electricalInterior",
        "ElectricalInterior",
    ),
    group_aliases={
        "available": ("Available", "availability", "Availability", "Is Available"),
        "working": ("Working", "condition", "Condition"),
        "ac": ("AC", "AC & Safety", "safety", "Safety", "advanced"),
    },
    fields=(
        _yn("seat_cover", "Seat Cover", AVAILABLE, "seatCover"),
        _yn("sun_roof", "Sun Roof", AVAILABLE, "sunRoof"),
        _yn("car_antenna", "Car Antenna", AVAILABLE, "carAntenna", "Antenna"),
        FieldSpec(
            name="power_windows_count",
            label="No. of Power Windows",
            kind=FieldKind.CHOICE,
            group=AVAILABLE,
            aliases=("Power Windows", "powerWindowsCount"),
            required=True,
            required_message="Select Power Windows count",
            choices=("0", "2", "4"),
        ),
        FieldSpec(
            name="air_bags_count",
            label="No. of Airbags",
            kind=FieldKind.TEXT,
            group=AVAILABLE,
            aliases=("No. of Air Bags", "Air Bags", "Airbags", "airBagsCount"),
            report_default="0",
        ),
        _yn("power_windows", "Power Windows", ELECTRICAL_WORKING, "powerWindowsWorking"),
        _yn("air_bags", "Air Bags", ELECTRICAL_WORKING, "airBagsWorking"),
        _yn("parking_brake", "Parking Brake Lever", ELECTRICAL_WORKING, "Parking Brake"),
        _yn("horn", "Horn", ELECTRICAL_WORKING),
        _yn("instrument_cluster", "Instrument Cluster", ELECTRICAL_WORKING),
        _yn("wiper", "Wiper", ELECTRICAL_WORKING),
        _yn("head_lamp", "Head Lamp", ELECTRICAL_WORKING),
        _yn("tail_lamp", "Tail Lamp", ELECTRICAL_WORKING),
        _yn("fog_lamp", "Fog Lamp", ELECTRICAL_WORKING),
        _yn("cabin_light", "Cabin Light", ELECTRICAL_WORKING),
        FieldSpec(name="blinker_light", label="Blinker Light", group=ELECTRICAL_WORKING),
        _yn("seat_belts", "Seat Belts", ELECTRICAL_WORKING),
        FieldSpec(
            name="ac_effectiveness",
            label="AC Effectiveness",
            kind=FieldKind.CHOICE,
            aliases=("acEffectiveness",),
            also_in=("ac",),
            required=True,
            choices=("Effective", "Non-Effective", "AC Not Available"),
            choice_hints=(
                ("not available", "AC Not Available"),
                ("not effective", "Non-Effective"),
                ("non", "Non-Effective"),
                ("effective", "Effective"),
            ),
        ),
        FieldSpec(
            name="ac_grill_efficiency",
            label="AC Grill Efficiency",
            kind=FieldKind.CHOICE,
            aliases=("acGrillEfficiency",),
            also_in=("ac",),
            required=True,
            choices=("Bad (>14°c)", "Average (7-14°c)", "Excellent (<=7°c)"),
            choice_hints=(
                ("bad", "Bad (>14°c)"),
                ("average", "Average (7-14°c)"),
                ("avg", "Average (7-14°c)"),
                ("excellent", "Excellent (<=7°c)"),
                ("good", "Excellent (<=7°c)"),
            ),
        ),
        _yn_na("climate_control_ac", "Climate Control AC", "climateControlAC"),
        _yn_na("heater", "Heater"),
        _yn_na("orvm", "ORVM"),
        _yn_na("steering_mounted_controls", "Steering Mounted Controls", "steeringMounted"),
        _yn_na("abs", "ABS"),
        _yn_na("reverse_parking_sensors", "Reverse Parking Sensors", "reverseSensors"),
        _yn_na("reverse_camera", "Reverse Camera", "reverseCamera"),
        _yn_na("keyless_locking", "Keyless/Center Locking", "keylessLocking"),
        FieldSpec(
            name="keyless_locking_details",
            label="Keyless/Center Locking Details",
            kind=FieldKind.TEXT,
            also_in=("ac",),
        ),
        _yn_na("music_system", "Music System", "musicSystem"),
        FieldSpec(
            name="music_system_details",
            label="Music System Details",
            kind=FieldKind.TEXT,
            aliases=("musicSystemDetails",),
            also_in=("ac",),
        ),
        FieldSpec(
            name="odometer_image",
            label="Odometer image",
            kind=FieldKind.ASSET,
            aliases=("Odometer Image", "odometerImage", "Odometer"),
            required=True,
            required_message="Add odometer image.",
            upload_name="odometer",
        ),
        FieldSpec(
            name="interior_images",
            label="Interior images",
            kind=FieldKind.ASSET_LIST,
            aliases=("Interior Images", "interiorImages", "images"),
            slots=4,
            required=True,
            required_message="Add at least one interior image.",
            upload_name="interior{index}",
        ),
        FieldSpec(
            name="refurb_cost",
            label="Refurbishment Cost",
            kind=FieldKind.TEXT,
            aliases=("Interior Refurbishment Cost", "refurbishmentCost"),
            required=True,
            required_message="Enter refurbishment cost.",
            report_default="0",
        ),
    ),
)


EXTERIOR_PANELS = (
    "Bonnet & Front Windshield",
    "Front Bumper",
    "Left Front Edge",
    "Roof Front",
    "Left Front",
    "Left Rear",
    "Left Rear Edge",
    "Rear Bumper",
    "Tailgate & Rear Windshield",
    "Right Rear Edge",
    "Roof Rear",
    "Right Rear",
    "Right Front",
    "Right Front Edge",
)
TYRE_POSITIONS = ("Front Right", "Front Left", "Rear Right", "Rear Left", "Spare")
TYRES = ("tyres",)


def _slug(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", label.lower()).strip("_")


def _panel(panel: str) -> tuple[FieldSpec, FieldSpec]:
    slug = _slug(panel)
    return (
        FieldSpec(
            name=f"{slug}_image",
            label="image",
            kind=FieldKind.ASSET,
            group=(panel,),
            aliases=("photo", "photoUri"),
            group_only=True,
            required=True,
            required_message=f"Add {panel} photo.",
        ),
        FieldSpec(
            name=f"{slug}_scratch",
            label="scratch",
            kind=FieldKind.CHOICE,
            group=(panel,),
            aliases=("status", "condition"),
            group_only=True,
            required=True,
            required_message=f"Select {panel} scratch status.",
            choices=("Minor Scratch", "Major Scratch", "No Scratch"),
            choice_hints=(("minor", "Minor Scratch"), ("major", "Major Scratch"), ("no", "No Scratch")),
        ),
    )


def _tyre(position: str) -> FieldSpec:
    return FieldSpec(
        name=f"tyre_{_slug(position)}",
        label=position,
        kind=FieldKind.CHOICE,
        group=TYRES,
        aliases=(position.replace(" ", ""),),
        required=True,
        required_message=f"Select {position} tyre.",
        choices=("Bad (<2mm)", "Average (2-6mm)", "Good (6-8mm)", "Excellent (>8mm)"),
        choice_hints=(
            ("bad", "Bad (<2mm)"),
            ("average", "Average (2-6mm)"),
            ("good", "Good (6-8mm)"),
            ("excellent", "Excellent (>8mm)"),
            ("great", "Excellent (>8mm)"),
            ("ok", "Excellent (>8mm)"),
        ),
    )


EXTERIOR_SCHEMA = SectionSchema(
    kind=SectionKind.EXTERIOR,
    detail_endpoint="/api/view-inspection",
    write_endpoint=None,
    section_keys=("exterior", "Exterior", "ExteriorInspection"),
    group_aliases={
        "tyres": (
            "Tyres",
            "tyreThreadCount",
            "TyreThreadCount",
            "Tyre Thread Count",
            "tyre",
        ),
    },
    fields=(
        *(_tyre(position) for position in TYRE_POSITIONS),
        FieldSpec(
            name="wheel_type",
            label="Wheel Type",
            kind=FieldKind.CHOICE,
            aliases=("wheelType", "wheels", "wheel"),
            required=True,
            choices=("Alloys", "Normal Rim"),
            choice_hints=(
                ("alloy", "Alloys"),
                ("rim", "Normal Rim"),
                ("steel", "Normal Rim"),
                ("normal", "Normal Rim"),
            ),
        ),
        FieldSpec(
            name="tyre_refurb_cost",
            label="Refurbishment Cost (Tyre)",
            kind=FieldKind.TEXT,
            aliases=(
                "tyreRefurbCost",
                "tyreCost",
                "tyreRefurbishmentCost",
                "Refurbishment Cost - Tyre",
            ),
            required=True,
            required_message="Enter tyre refurbishment cost.",
        ),
        FieldSpec(
            name="exterior_refurb_cost",
            label="Exterior Refurbishment Cost",
            kind=FieldKind.TEXT,
            aliases=("exteriorRefurbCost", "refurbishmentCostExterior", "exteriorCost"),
            required=True,
            required_message="Enter exterior refurbishment cost.",
        ),
        FieldSpec(
            name="repaint_done",
            label="Repaint Done",
            aliases=("repaintDone", "repaint", "paint"),
            required=True,
        ),
        *(spec for panel in EXTERIOR_PANELS for spec in _panel(panel)),
    ),
)


TEST_DRIVE_COMPLETED = "test_drive_completed"
DRIVE_DETAILS = ("Drive Details",)

TEST_DRIVE_SCHEMA = SectionSchema(
    kind=SectionKind.TEST_DRIVE,
    detail_endpoint="/api/view-test-drive-report",
    fallback_detail_endpoints=("/api/view-inspection",),
    write_endpoint="/api/add-test-drive",
    section_keys=(
        "testDriveReports",
        "testDrive",
        "TestDrive",
        "test_drive",
        "testdrive",
        "Test Drive",
    ),
    section_unwrap=("Reports",),
    group_aliases={"Drive Details": ("driveDetails",)},
    json_payload=True,
    fields=(
        FieldSpec(
            name=TEST_DRIVE_COMPLETED,
            label="Test Drive Completed",
            kind=FieldKind.FLAG,
            aliases=(
                "isComplete",
                "Is Test Drive Complete",
                "completed",
                "testDriveCompleted",
            ),
        ),
        FieldSpec(
            name="driving_experience",
            label="Driving Experience",
            kind=FieldKind.CHOICE,
            aliases=("drivingExperience", "Experience"),
            required=True,
            required_message="Select driving experience.",
            choices=("Excellent", "Good", "Average", "Others"),
            choice_hints=(
                ("excellent", "Excellent"),
                ("good", "Good"),
                ("average", "Average"),
                ("avg", "Average"),
            ),
            choice_fallback="Others",
        ),
        FieldSpec(
            name="problems",
            label="Problem",
            kind=FieldKind.CHOICE_LIST,
            aliases=("Specify the Problem", "problem", "Test Drive Issue"),
            required=True,
            required_message="Select at least one problem.",
            choices=(
                "No Problem",
                "Engine",
                "Clutch",
                "Gear Shifting",
                "Suspension",
                "Brakes",
                "Others",
            ),
            choice_hints=(
                ("engine", "Engine"),
                ("clutch", "Clutch"),
                ("gear", "Gear Shifting"),
                ("susp", "Suspension"),
                ("brake", "Brakes"),
                ("no problem", "No Problem"),
                ("none", "No Problem"),
            ),
            choice_fallback="Others",
        ),
        FieldSpec(
            name="kms_driven",
            label="Km Driven",
            kind=FieldKind.TEXT,
            group=DRIVE_DETAILS,
            aliases=("Km's Driven", "Kms Driven", "kmsDriven", "Distance"),
            required=True,
            required_message="Enter Km's Driven.",
            applies_when=(TEST_DRIVE_COMPLETED, ("Yes",)),
        ),
        FieldSpec(
            name="time_taken",
            label="Time Taken",
            kind=FieldKind.TEXT,
            group=DRIVE_DETAILS,
            aliases=("timeTaken", "Time Taken (in min)", "Duration", "Duration (min)"),
            required=True,
            required_message="Enter Time Taken.",
            applies_when=(TEST_DRIVE_COMPLETED, ("Yes",)),
        ),
        FieldSpec(
            name="incomplete_reason",
            label="Incomplete Test Drive",
            kind=FieldKind.TEXT,
            aliases=("Incomplete Reason", "incompleteReason", "Reason", "Reason for incomplete"),
            required=True,
            required_message="Select incomplete reason.",
            applies_when=(TEST_DRIVE_COMPLETED, ("", "No")),
        ),
        FieldSpec(
            name="remarks",
            label="Additional Remarks",
            kind=FieldKind.TEXT,
            aliases=("Remarks", "Notes", "comments"),
        ),
    ),
)

SECTION_SCHEMAS: dict[SectionKind, SectionSchema] = {
    schema.kind: schema
    for schema in (
        ENGINE_SCHEMA,
        FUNCTIONS_SCHEMA,
        FRAMES_SCHEMA,
        DEFECTS_SCHEMA,
        ELECTRICAL_SCHEMA,
        EXTERIOR_SCHEMA,
        TEST_DRIVE_SCHEMA,
    )
}


def get_schema(kind: SectionKind | str) -> SectionSchema:
    """Look up a schema by kind or by its string value."""
    return SECTION_SCHEMAS[SectionKind(kind)]
