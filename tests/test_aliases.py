"""Tests for alias resolution against inconsistent remote records."""

import pytest


class TestPick:
    """Tests for single-fragment key lookup."""

    def test_exact_key(self):
        """Test that an exact key is returned as-is."""
        from inspection_sync.sync import AliasResolver

        assert AliasResolver().pick({"Radiator": "Yes"}, ["Radiator"]) == "Yes"

    def test_trailing_space_and_case(self):
        """Test that keys match ignoring case and stray whitespace."""
        from inspection_sync.sync import AliasResolver

        resolver = AliasResolver()
        assert resolver.pick({"working ": {"a": 1}}, ["working"]) == {"a": 1}
        assert resolver.pick({"STARTER  MOTOR": "No"}, ["Starter Motor"]) == "No"

    def test_alias_priority(self):
        """Test that earlier aliases win over later ones."""
        from inspection_sync.sync import AliasResolver

        fragment = {"defectImage": "https://cdn.test/b.jpg", "Defect image": "https://cdn.test/a.jpg"}
        value = AliasResolver().pick(fragment, ["Defect image", "defectImage"])
        assert value == "https://cdn.test/a.jpg"

    def test_blank_value_falls_through(self):
        """Test that a blank value lets an older spelling match."""
        from inspection_sync.sync import AliasResolver

        fragment = {"Engine image": "", "engineImage": "https://cdn.test/e.jpg"}
        value = AliasResolver().pick(fragment, ["Engine image", "engineImage"])
        assert value == "https://cdn.test/e.jpg"

    def test_missing(self):
        """Test that absent keys and non-mappings resolve to MISSING."""
        from inspection_sync.sync import MISSING, AliasResolver

        resolver = AliasResolver()
        assert resolver.pick({"Other": "Yes"}, ["Radiator"]) is MISSING
        assert resolver.pick(["not", "a", "dict"], ["Radiator"]) is MISSING
        assert resolver.pick(None, ["Radiator"]) is MISSING
        assert not MISSING


class TestNormalizeYesNo:
    """Tests for yes/no canonicalisation."""

    @pytest.mark.parametrize("raw", ["yes", "YES", " Yes ", "y", "true", "1", True, 1])
    def test_yes(self, raw):
        from inspection_sync.sync import normalize_yes_no

        assert normalize_yes_no(raw) == "Yes"

    @pytest.mark.parametrize("raw", ["no", "No", "n", "FALSE", "0", False, 0])
    def test_no(self, raw):
        from inspection_sync.sync import normalize_yes_no

        assert normalize_yes_no(raw) == "No"

    @pytest.mark.parametrize("raw", [None, "", "maybe", "Already Repaired"])
    def test_unknown(self, raw):
        from inspection_sync.sync import normalize_yes_no

        assert normalize_yes_no(raw) == ""


class TestNormalizeChoice:
    """Tests for mapping free-form answers onto a field's choices."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Effective", "Effective"),
            ("not effective", "Non-Effective"),
            ("Non-Effective", "Non-Effective"),
            ("AC not available", "AC Not Available"),
            ("", ""),
            ({"oops": 1}, ""),
        ],
    )
    def test_ac_effectiveness(self, raw, expected):
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import normalize_choice

        spec = get_schema("electrical").get_field("ac_effectiveness")
        assert normalize_choice(spec, raw) == expected

    def test_yes_no_spellings_count_when_offered(self):
        """Test that yes/no spellings only map onto fields offering Yes and No."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import normalize_choice

        schema = get_schema("electrical")
        assert normalize_choice(schema.get_field("heater"), "y") == "Yes"
        assert normalize_choice(schema.get_field("heater"), "Not applicable") == "N/A"
        assert normalize_choice(schema.get_field("power_windows_count"), "0") == "0"
        assert normalize_choice(schema.get_field("power_windows_count"), "yes") == ""

    def test_fallback(self):
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import normalize_choice

        spec = get_schema("testDrive").get_field("driving_experience")
        assert normalize_choice(spec, "bumpy") == "Others"
        assert normalize_choice(spec, "AVG") == "Average"


class TestProject:
    """Tests for projecting detail payloads onto section drafts."""

    def test_engine_nested_groups(self, engine_payload):
        """Test engine projection through group aliases."""
        from inspection_sync.schema import DraftStatus, get_schema
        from inspection_sync.sync import AliasResolver

        draft = AliasResolver().project(get_schema("engine"), "car-1", engine_payload)

        assert draft is not None
        assert draft.entity_id == "car-1"
        assert draft.status == DraftStatus.SYNCED
        assert draft.values["engine_working"] == "Yes"
        assert draft.values["radiator"] == "No"
        assert draft.values["black_smoke"] == "No"
        assert draft.values["engine_cost"] == "1200"
        assert draft.values["engine_image"] == "https://cdn.test/engine-old.jpg"
        assert draft.values["highlight_positives"] == ""

    def test_remote_id_prefers_first_inspection(self, engine_payload):
        """Test that allInspections[0].id beats the top-level id."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        draft = AliasResolver().project(get_schema("engine"), "car-1", engine_payload)
        assert draft.remote_id == "insp-9"

    def test_section_at_root(self):
        """Test an older payload with the section at the record root."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {"id": 77, "Engine": {"Radiator": "y", "Battery": "false"}}
        draft = AliasResolver().project(get_schema("engine"), "car-1", payload)

        assert draft.remote_id == "77"
        assert draft.values["radiator"] == "Yes"
        assert draft.values["battery"] == "No"
        assert draft.values["silencer"] == ""
        assert draft.values["engine_image"] is None

    def test_functions_trailing_space_group(self):
        """Test the 'proper_condition ' spelling of the functions group."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "functions": {
                "proper_condition ": {"Steering": "Yes", "gearShifting": "No"},
                "noise": {"Gear Box Noise": "Yes"},
            }
        }
        draft = AliasResolver().project(get_schema("functions"), "car-1", payload)

        assert draft.values["steering"] == "Yes"
        assert draft.values["gear_shifting"] == "No"
        assert draft.values["gear_box_noise"] == "Yes"
        assert draft.remote_id is None

    def test_frames_images_and_nesting(self):
        """Test frame images fill fixed slots and nested damage groups resolve."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "frames": {
                "anyDamageIn": {
                    "front": {"Cross Member": "No"},
                    "Pillars": {"Left B-Pillar": "Yes", "Left B-Pillar Details": "Repainted"},
                },
                "Flood Affected Vehicle": "No",
                "frameImages": ["https://cdn.test/f1.jpg", "", "https://cdn.test/f3.jpg"],
            }
        }
        draft = AliasResolver().project(get_schema("frames"), "car-1", payload)

        assert draft.values["cross_member"] == "No"
        assert draft.values["left_b_pillar"] == "Yes"
        assert draft.values["left_b_pillar_details"] == "Repainted"
        assert draft.values["flood_affected"] == "No"
        assert draft.values["frame_images"] == [
            "https://cdn.test/f1.jpg",
            None,
            "https://cdn.test/f3.jpg",
            None,
        ]

    def test_defect_entries(self, defects_payload):
        """Test repeatable defect entries under every spelling."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        draft = AliasResolver().project(get_schema("defective"), "car-1", defects_payload)

        assert len(draft.entries) == 2
        assert draft.entries[0].values == {
            "image": "https://cdn.test/d1.jpg",
            "remark": "Dent on door",
        }
        assert draft.entries[1].values == {"image": "https://cdn.test/d2.jpg", "remark": "Scratch"}
        assert draft.remote_id == "defect-record-3"

    def test_server_deleted_files(self, defects_payload):
        """Test that a server-side deletedFiles list is picked up."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        defects_payload["deletedFiles"] = ["https://cdn.test/old.jpg", "https://cdn.test/old.jpg"]
        draft = AliasResolver().project(get_schema("defective"), "car-1", defects_payload)
        assert draft.deleted_files == ["https://cdn.test/old.jpg"]

    def test_malformed_shapes_never_raise(self):
        """Test that unexpected structure resolves to empty values."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        resolver = AliasResolver()
        payload = {"engine": {"working": "not a dict", "Radiator": {"nested": True}}}
        draft = resolver.project(get_schema("engine"), "car-1", payload)
        assert draft.values["radiator"] == ""

        rows = {"DefectsReport": {"Reports": {"Report": "oops"}}}
        assert resolver.project(get_schema("defective"), "car-1", rows).entries == []

    def test_no_trace_of_section(self):
        """Test that an empty payload projects to None."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        assert AliasResolver().project(get_schema("engine"), "car-1", {}) is None
        assert AliasResolver().project(get_schema("engine"), "car-1", None) is None

    def test_record_without_section_keeps_id(self):
        """Test that a record lacking the section still yields its id."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        draft = AliasResolver().project(get_schema("frames"), "car-1", {"id": "r-5"})
        assert draft.remote_id == "r-5"
        assert not draft.has_content()


class TestProjectOtherSections:
    """Tests for the electrical, exterior and test drive shapes."""

    def test_electrical_groups_and_ac_container(self):
        """Test the availability, condition and AC containers with their aliases."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "allInspections": [
                {
                    "id": "insp-2",
                    "Interior": {
                        "Availability": {
                            "Seat Cover": "yes",
                            "Sun Roof": "No",
                            "Power Windows": 4,
                            "Air Bags": 6,
                        },
                        "condition": {"Horn": "Yes", "Parking Brake": "No", "Blinker Light": "yes"},
                        "AC & Safety": {
                            "AC Effectiveness": "Not Effective",
                            "AC Grill Efficiency": "avg",
                            "ABS": "n/a",
                            "Heater": "y",
                        },
                        "Music System": "No",
                        "Odometer": "https://cdn.test/odo.jpg",
                        "images": "https://cdn.test/i1.jpg, https://cdn.test/i2.jpg",
                        "Interior Refurbishment Cost": 800,
                    },
                }
            ]
        }

        draft = AliasResolver().project(get_schema("electrical"), "car-1", payload)
        values = draft.values

        assert draft.remote_id == "insp-2"
        assert values["seat_cover"] == "Yes"
        assert values["power_windows_count"] == "4"
        assert values["air_bags_count"] == "6"
        assert values["power_windows"] == ""
        assert values["parking_brake"] == "No"
        assert values["blinker_light"] == "Yes"
        assert values["ac_effectiveness"] == "Non-Effective"
        assert values["ac_grill_efficiency"] == "Average (7-14°c)"
        assert values["abs"] == "N/A"
        assert values["heater"] == "Yes"
        assert values["music_system"] == "No"
        assert values["odometer_image"] == "https://cdn.test/odo.jpg"
        assert values["interior_images"] == ["https://cdn.test/i1.jpg", "https://cdn.test/i2.jpg", None, None]
        assert values["refurb_cost"] == "800"

    def test_exterior_panels_and_tyres(self):
        """Test panel containers never borrow values from the section root."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "allInspections": [
                {
                    "exterior": {
                        "Front Bumper": {"photo": "https://cdn.test/fb.jpg", "status": "minor dent"},
                        "Roof Rear": {"condition": "No scratches"},
                        "status": "major",
                        "Tyre Thread Count": {"FrontRight": "good", "Spare": {"value": "bad"}},
                        "Wheel Type": "Steel rims",
                        "tyreCost": 2000,
                        "repaint": "true",
                    }
                }
            ]
        }

        values = AliasResolver().project(get_schema("exterior"), "car-1", payload).values

        assert values["front_bumper_image"] == "https://cdn.test/fb.jpg"
        assert values["front_bumper_scratch"] == "Minor Scratch"
        assert values["roof_rear_scratch"] == "No Scratch"
        assert values["bonnet_front_windshield_scratch"] == ""
        assert values["tyre_front_right"] == "Good (6-8mm)"
        assert values["tyre_spare"] == "Bad (<2mm)"
        assert values["tyre_front_left"] == ""
        assert values["wheel_type"] == "Normal Rim"
        assert values["tyre_refurb_cost"] == "2000"
        assert values["repaint_done"] == "Yes"

    def test_test_drive_report(self):
        """Test the dedicated report shape, unwrapped from its Reports key."""
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "testDriveReports": {
                "Reports": {
                    "id": 77,
                    "Test Drive Completed": True,
                    "Drive Details": {"Km Driven": 12, "Time Taken": "25"},
                    "Driving Experience": "Pretty good",
                    "Problem": ["brake squeal", "none"],
                    "Additional Remarks": "Smooth",
                }
            }
        }

        draft = AliasResolver().project(get_schema("testDrive"), "car-1", payload)

        assert draft.remote_id == "77"
        assert draft.values["test_drive_completed"] == "Yes"
        assert draft.values["kms_driven"] == "12"
        assert draft.values["time_taken"] == "25"
        assert draft.values["driving_experience"] == "Good"
        assert draft.values["problems"] == ["Brakes", "No Problem"]
        assert draft.values["incomplete_reason"] == ""
        assert draft.values["remarks"] == "Smooth"

    def test_test_drive_inside_inspection_record(self):
        from inspection_sync.schema import get_schema
        from inspection_sync.sync import AliasResolver

        payload = {
            "allInspections": [
                {
                    "id": "insp-4",
                    "testDrive": {
                        "completed": "Not Completed",
                        "Reason": "Customer denied",
                        "Problem": "Clutch slipping",
                    },
                }
            ]
        }

        draft = AliasResolver().project(get_schema("testDrive"), "car-1", payload)

        assert draft.remote_id == "insp-4"
        assert draft.values["test_drive_completed"] == "No"
        assert draft.values["incomplete_reason"] == "Customer denied"
        assert draft.values["problems"] == ["Clutch"]
