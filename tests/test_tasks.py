"""Tests for step progress reporting."""

from unittest.mock import patch

import pytest

from pt_core.tasks import StepSkipped, step


@patch("pt_core.tasks.failed")
@patch("pt_core.tasks.skipped")
@patch("pt_core.tasks.done")
class TestStep:
    def test_done_with_renamed_title(self, mock_done, mock_skipped, mock_failed):
        with step("Fetching") as s:
            s.title = "Fetched 3 things"
        mock_done.assert_called_once_with("Fetched 3 things")
        mock_failed.assert_not_called()

    def test_skipped_is_not_an_error(self, mock_done, mock_skipped, mock_failed):
        with step("Enabling auto merge"):
            raise StepSkipped("Auto merge not available")
        mock_skipped.assert_called_once_with("Auto merge not available")
        mock_done.assert_not_called()

    def test_failure_reported_and_reraised(self, mock_done, mock_skipped, mock_failed):
        with pytest.raises(ValueError):
            with step("Rebasing commits"):
                raise ValueError("conflict")
        mock_failed.assert_called_once_with("Rebasing commits")
        mock_done.assert_not_called()
