"""Tests for Auto Scaling group resources."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import boto3
import pytest

from awsnuke.resources.autoscaling import AutoScalingGroup, list_autoscaling_groups


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def mock_session(mock_client: MagicMock) -> Mock:
    session = Mock(spec=boto3.Session)
    session.region_name = "us-east-1"
    session.client.return_value = mock_client
    return session


class TestAutoScalingGroup:
    """Tests for AutoScalingGroup."""

    def test_remove_forces_deletion(self, mock_session: Mock, mock_client: MagicMock) -> None:
        AutoScalingGroup(mock_session, "web-asg").remove()

        mock_client.delete_auto_scaling_group.assert_called_once_with(
            AutoScalingGroupName="web-asg", ForceDelete=True
        )

    @patch("awsnuke.resources.autoscaling.time.sleep")
    def test_wait_polls_until_gone(self, mock_sleep: Mock, mock_session: Mock, mock_client: MagicMock) -> None:
        """Test wait returns once the group is no longer described."""
        mock_client.describe_auto_scaling_groups.side_effect = [
            {"AutoScalingGroups": [{"AutoScalingGroupName": "web-asg"}]},
            {"AutoScalingGroups": [{"AutoScalingGroupName": "web-asg"}]},
            {"AutoScalingGroups": []},
        ]

        AutoScalingGroup(mock_session, "web-asg").wait()

        assert mock_client.describe_auto_scaling_groups.call_count == 3
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(AutoScalingGroup.poll_interval)

    def test_list_groups(self, mock_session: Mock, mock_client: MagicMock) -> None:
        mock_client.get_paginator.return_value.paginate.return_value = [
            {"AutoScalingGroups": [{"AutoScalingGroupName": "web-asg", "Tags": [{"Key": "Env", "Value": "dev"}]}]}
        ]

        groups = list_autoscaling_groups(mock_session)

        assert [str(g) for g in groups] == ["web-asg"]
        assert groups[0].tags == {"Env": "dev"}
