import pytest

from api.models import CompleteMetricConfig


@pytest.fixture
def complete_config_body():
    """Metadata API response for a complete metric package (camelCase, out of display order)."""
    return {
        "metric": {
            "metricId": "timeliness_sch",
            "metricName": "In OR <19 hrs",
            "specialty": "Orthopedics",
            "questionCode": "I25",
            "thresholdHours": 19,
            "contentVersion": "2",
        },
        "signalGroups": [
            {
                "groupName": "Delay Drivers",
                "displayOrder": 2,
                "signals": [
                    {"signalCode": "ortho_consult", "signalName": "Ortho consult"},
                    {"signalCode": "imaging_done", "signalName": "Imaging"},
                ],
            },
            {
                "groupName": "Core",
                "displayOrder": 1,
                "signals": [
                    {"signalCode": "on_time_19h", "signalName": "On time (19h)"},
                    {"signalCode": "neurovascular_exam", "signalName": "NV exam"},
                ],
            },
        ],
        "followups": [
            {"followupName": "delay_documented", "followupType": "yesno"},
            {"followupName": "delay_reason", "followupType": "text", "dependsOn": "delay_documented"},
        ],
    }


@pytest.fixture
def complete_config(complete_config_body):
    return CompleteMetricConfig.model_validate(complete_config_body)
