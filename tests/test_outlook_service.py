from unittest.mock import patch

from services.outlook_service import city_for_district, get_regional_outlook
from services.results import CropInsight

WEATHER = {"city": "Ballari", "temperature": 33.0, "humidity": 38, "description": "clear sky"}
INSIGHT = CropInsight(district="Ballari (Bellary)", month="July",
                      suitable_crops=["Cotton"], all_crops=["Cotton"], tips="Mulch")


def test_city_for_district():
    assert city_for_district("Ballari (Bellary)") == "Ballari"
    assert city_for_district("Udupi") == "Udupi"


@patch("services.outlook_service.get_crop_insights", return_value=INSIGHT)
@patch("services.outlook_service.fetch_current_weather", return_value=WEATHER)
def test_outlook_joins_both_calls(mock_weather, mock_insight):
    outlook = get_regional_outlook("Ballari (Bellary)", "July")

    assert outlook == {"weather": WEATHER, "cropInsight": INSIGHT.to_dict()}
    mock_weather.assert_called_once_with("Ballari")
    mock_insight.assert_called_once_with("Ballari (Bellary)", "July")


@patch("services.outlook_service.get_crop_insights", return_value=INSIGHT)
@patch("services.outlook_service.fetch_current_weather", return_value={"error": "Weather API timed out."})
def test_weather_failure_fails_outlook(mock_weather, mock_insight):
    assert get_regional_outlook("Ballari (Bellary)", "July") == {"error": "Weather API timed out."}


@patch("services.outlook_service.get_crop_insights",
       return_value=CropInsight(district="Kolar", month="May", error="API Key not configured."))
@patch("services.outlook_service.fetch_current_weather", return_value=WEATHER)
def test_insight_failure_fails_outlook(mock_weather, mock_insight):
    assert get_regional_outlook("Kolar", "May") == {"error": "API Key not configured."}
