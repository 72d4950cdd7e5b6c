# tests/test_normalizer.py
"""Тесты water_parser/normalizer.py: приведение ответа к полной записи."""
import pytest

from water_parser.json_block import extract_json_block
from water_parser.json_fix import smart_fix_json
from water_parser.normalizer import normalize_param, normalize_result
from water_parser.schemas import SCALAR_FIELDS, WaterAnalysisResult, WaterParam


class TestAnyInput:

    @pytest.mark.parametrize("parsed", [None, [], [1, 2], 42, 3.5, "текст", True, {}])
    def test_never_raises(self, parsed):
        result = normalize_result(parsed)
        assert isinstance(result, WaterAnalysisResult)
        assert result == WaterAnalysisResult()

    def test_empty_record_is_complete(self):
        result = normalize_result(None)
        for field in SCALAR_FIELDS:
            assert getattr(result, field) == ""
        assert result.params == []
        assert result.model_analysis == ""


class TestScalars:

    def test_full_camel_case_page(self, full_page_payload):
        result = normalize_result(full_page_payload)
        assert result.blank_number == "117/24"
        assert result.customer_name == "Иванов И.И."
        assert result.intake_type == "скважина"
        assert result.model_analysis.startswith("Рекомендуется")
        assert [p.param_code for p in result.params] == ["iron", "hardness", "ph"]

    def test_snake_case_equals_camel_case(self):
        camel = {
            "blankNumber": "7",
            "customerName": "Петров",
            "sampleDate": "01.02.2024",
            "params": [{"name": "pH", "value": "7.2", "paramCode": "ph"}],
            "modelAnalysis": "ok",
        }
        snake = {
            "blank_number": "7",
            "customer_name": "Петров",
            "sample_date": "01.02.2024",
            "params": [{"name": "pH", "value": "7.2", "param_code": "ph"}],
            "model_analysis": "ok",
        }
        assert normalize_result(snake) == normalize_result(camel)

    def test_camel_case_wins_over_snake_case(self):
        result = normalize_result({"blankNumber": "A", "blank_number": "B"})
        assert result.blank_number == "A"

    def test_empty_camel_falls_back_to_snake(self):
        result = normalize_result({"blankNumber": "", "blank_number": "B"})
        assert result.blank_number == "B"

    def test_numbers_become_strings(self):
        result = normalize_result({"blankNumber": 42, "customerPhone": 79000000000})
        assert result.blank_number == "42"
        assert result.customer_phone == "79000000000"

    def test_integral_float_has_no_fraction(self):
        assert normalize_result({"blankNumber": 42.0}).blank_number == "42"

    @pytest.mark.parametrize("value", [None, "null", "N/A", "-", [], {"x": 1}])
    def test_placeholders_and_structures_are_empty(self, value):
        assert normalize_result({"customerName": value}).customer_name == ""

    def test_strings_are_stripped(self):
        assert normalize_result({"appearance": "  мутная \n"}).appearance == "мутная"

    def test_unknown_keys_ignored(self):
        result = normalize_result({"blankNumber": "1", "somethingElse": "x"})
        assert result.blank_number == "1"

    def test_wrapper_object_unwrapped(self, full_page_payload):
        assert normalize_result({"data": full_page_payload}) == normalize_result(full_page_payload)

    def test_wrapper_ignored_when_known_keys_present(self):
        result = normalize_result({"blankNumber": "1", "data": {"blankNumber": "2"}})
        assert result.blank_number == "1"


class TestParams:

    def test_parameters_alias(self):
        result = normalize_result({"parameters": [{"name": "pH", "value": 7}]})
        assert len(result.params) == 1
        assert result.params[0].value == 7.0

    def test_params_not_a_list(self):
        assert normalize_result({"params": {"name": "pH"}}).params == []

    def test_non_dict_items_skipped(self):
        result = normalize_result({"params": ["pH", None, 5, {"name": "Железо", "value": 0.1}]})
        assert [p.name for p in result.params] == ["Железо"]

    def test_order_preserved(self):
        items = [{"name": str(i), "value": i} for i in range(5)]
        result = normalize_result({"params": items})
        assert [p.name for p in result.params] == ["0", "1", "2", "3", "4"]

    @pytest.mark.parametrize("raw, expected", [
        (7.2, 7.2),
        (7, 7.0),
        ("7.2", 7.2),
        ("0,05", 0.05),
        (" 1 250 ", 1250.0),
        ("1 250,5", 1250.5),
        ("-1.5", -1.5),
    ])
    def test_value_coerced(self, raw, expected):
        assert normalize_param({"value": raw}).value == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "не обнаружено", "<0.1", [], {}, True, float("nan"), "inf"])
    def test_bad_value_becomes_zero(self, raw):
        assert normalize_param({"value": raw}).value == 0.0

    def test_missing_value_becomes_zero(self):
        assert normalize_param({"name": "pH"}).value == 0.0

    @pytest.mark.parametrize("raw, expected", [
        (0.3, 0.3),
        ("7,0", 7.0),
        (None, None),
        ("нет", None),
        (float("inf"), None),
    ])
    def test_pdk(self, raw, expected):
        assert normalize_param({"pdk": raw}).pdk == expected

    def test_pdk_absent(self):
        assert normalize_param({"name": "pH"}).pdk is None

    def test_param_code_lowercased(self):
        assert normalize_param({"paramCode": "PH"}).param_code == "ph"

    def test_param_defaults(self):
        assert normalize_param({}) == WaterParam()

    def test_non_dict_param(self):
        assert normalize_param("pH") is None


class TestConcreteScenario:

    def test_reply_to_record(self, fenced_reply):
        json_str = extract_json_block(fenced_reply)
        assert json_str == (
            '{"blankNumber": "42", "params": [{"name": "pH", "value": "7.0", "paramCode": "ph"}]}'
        )
        parsed = smart_fix_json(json_str)
        assert parsed == {
            "blankNumber": "42",
            "params": [{"name": "pH", "value": "7.0", "paramCode": "ph"}],
        }
        result = normalize_result(parsed)
        assert result.blank_number == "42"
        for field in SCALAR_FIELDS:
            if field != "blank_number":
                assert getattr(result, field) == ""
        assert result.params == [WaterParam(name="pH", value=7.0, unit="", pdk=None, param_code="ph")]

    def test_camel_case_output(self, fenced_reply):
        result = normalize_result(smart_fix_json(extract_json_block(fenced_reply)))
        dumped = result.model_dump(by_alias=True)
        assert dumped["blankNumber"] == "42"
        assert dumped["params"][0] == {
            "name": "pH", "value": 7.0, "unit": "", "pdk": None, "paramCode": "ph",
        }
        assert dumped["modelAnalysis"] == ""
