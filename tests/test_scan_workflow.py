"""
Tests for the scan workflow state machine
"""
from datetime import date

import pytest

from journal_scanner.services.exceptions import (
    ConflictError,
    EmptyResultError,
    UpstreamError,
    ValidationError,
)
from journal_scanner.shared.scan_workflow import (
    DEMO_TEXT,
    Done,
    Failed,
    Idle,
    ReviewReady,
    ScanWorkflow,
    parse_entry_date,
)
from tests.conftest import FIXED_NOW, PNG_BYTES


def upload(workflow, gateway, content=PNG_BYTES, mime_type='image/png'):
    return workflow.submit_image(gateway, 'page.png', content, mime_type)


class TestParseEntryDate:
    """Test draft date parsing"""

    def test_iso_string(self):
        assert parse_entry_date('2026-03-14') == date(2026, 3, 14)

    def test_datetime_reduced_to_date(self):
        assert parse_entry_date(FIXED_NOW) == date(2026, 3, 14)

    def test_invalid_date(self):
        with pytest.raises(ValidationError, match='Invalid date'):
            parse_entry_date('14/03/2026')


class TestImageSelection:
    """Test upload and OCR"""

    def test_initial_state(self, workflow):
        snapshot = workflow.snapshot()

        assert snapshot['state'] == 'idle'
        assert snapshot['busy'] is False
        assert snapshot['draft'] is None

    def test_demo_mode_without_ocr_key(self, workflow, mock_gateway):
        """Test demonstration text is used and the OCR service is never called"""
        mock_gateway.has_ocr_key.return_value = False

        snapshot = upload(workflow, mock_gateway)

        assert workflow.history == ['idle', 'uploading', 'processing', 'review_ready']
        assert snapshot['state'] == 'review_ready'
        assert snapshot['draft']['ocr_text'] == DEMO_TEXT
        mock_gateway.submit_ocr.assert_not_called()

    def test_ocr_builds_draft(self, workflow, mock_gateway):
        """Test the draft title, date and text come from the capture and OCR"""
        snapshot = upload(workflow, mock_gateway)

        draft = snapshot['draft']
        assert draft['title'] == 'Morning walk'
        assert draft['date'] == '2026-03-14'
        assert draft['tags'] == []
        assert draft['ocr_text'] == draft['raw_ocr_text'] == 'Morning walk\n\nSaw a heron by the river.'
        assert snapshot['image_data'].startswith('data:image/png;base64,')
        assert snapshot['file_name'] == 'page.png'

    def test_ocr_receives_payload_without_data_uri_prefix(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        sent = mock_gateway.submit_ocr.call_args.args[0]
        assert not sent.startswith('data:')

    def test_empty_file_fails_upload(self, workflow, mock_gateway):
        """Test an empty file fails the upload step with nothing captured"""
        snapshot = upload(workflow, mock_gateway, content=b'')

        assert snapshot['state'] == 'error'
        assert snapshot['failed_step'] == 'upload'
        assert snapshot['image_data'] is None
        mock_gateway.submit_ocr.assert_not_called()

    def test_non_image_fails_upload(self, workflow, mock_gateway):
        snapshot = upload(workflow, mock_gateway, mime_type='application/pdf')

        assert snapshot['failed_step'] == 'upload'
        assert 'Unsupported file type' in snapshot['error']

    def test_new_image_after_upload_failure(self, workflow, mock_gateway):
        upload(workflow, mock_gateway, content=b'')

        snapshot = upload(workflow, mock_gateway)

        assert snapshot['state'] == 'review_ready'
        assert snapshot['error'] is None

    def test_ocr_failure_keeps_capture(self, workflow, mock_gateway):
        """Test a provider error fails the OCR step but keeps the image"""
        mock_gateway.submit_ocr.side_effect = EmptyResultError("No text found in image. Try a clearer photo.")

        snapshot = upload(workflow, mock_gateway)

        assert snapshot['state'] == 'error'
        assert snapshot['failed_step'] == 'ocr'
        assert 'clearer photo' in snapshot['error']
        assert snapshot['image_data'] is not None
        assert isinstance(workflow.state, Failed)

    def test_unexpected_ocr_failure_is_raised_after_failing(self, workflow, mock_gateway):
        mock_gateway.submit_ocr.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            upload(workflow, mock_gateway)

        assert workflow.state.name == 'error'

    def test_select_image_while_reviewing_conflicts(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        with pytest.raises(ConflictError):
            upload(workflow, mock_gateway)

    def test_select_image_after_ocr_failure_conflicts(self, workflow, mock_gateway):
        mock_gateway.submit_ocr.side_effect = UpstreamError("quota exceeded", status=429)
        upload(workflow, mock_gateway)

        with pytest.raises(ConflictError, match='Retry or reset'):
            upload(workflow, mock_gateway)


class TestDraftEditing:
    """Test edits while reviewing"""

    def test_edit_fields(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        snapshot = workflow.edit_draft(title='Heron', date='2026-03-01', tags=' birds, river ,', text='Edited')

        draft = snapshot['draft']
        assert draft == {
            'title': 'Heron',
            'date': '2026-03-01',
            'tags': ['birds', 'river'],
            'ocr_text': 'Edited',
            'raw_ocr_text': 'Morning walk\n\nSaw a heron by the river.',
        }
        assert snapshot['state'] == 'review_ready'

    def test_edits_do_not_add_history(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)
        before = list(workflow.history)

        workflow.edit_draft(title='A')
        workflow.edit_draft(title='B')

        assert workflow.history == before

    def test_invalid_date_leaves_draft_unchanged(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        with pytest.raises(ValidationError):
            workflow.edit_draft(title='Changed', date='not a date')

        assert workflow.state.draft.title == 'Morning walk'

    def test_edit_outside_review_conflicts(self, workflow):
        with pytest.raises(ConflictError):
            workflow.edit_draft(title='x')


class TestSubmission:
    """Test sending the draft and saving locally"""

    def test_submit_success(self, workflow, mock_gateway, entry_log):
        """Test a created page is logged with its id and url"""
        upload(workflow, mock_gateway)
        workflow.edit_draft(tags='walks')

        snapshot = workflow.submit(mock_gateway)

        assert snapshot['state'] == 'done'
        assert snapshot['notice'] == 'Saved to Notion.'
        assert len(entry_log) == 1
        entry = entry_log.all()[0]
        assert entry.id == 'page-123'
        assert entry.remote_url == 'https://www.notion.so/page-123'
        assert entry.tags == ('walks',)
        assert entry.created_at == FIXED_NOW
        page = mock_gateway.create_page.call_args.args[0]
        assert page.title == 'Morning walk'
        assert page.tags == ('walks',)
        assert workflow.history[-2:] == ['submitting', 'done']

    def test_done_snapshot_omits_image(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        snapshot = workflow.submit(mock_gateway)

        assert 'image_data' not in snapshot['entry']

    def test_blank_title_submitted_with_fallback(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)
        workflow.edit_draft(title='   ')

        workflow.submit(mock_gateway)

        page = mock_gateway.create_page.call_args.args[0]
        assert page.title == 'Journal Entry — 2026-03-14'

    def test_submit_failure_keeps_draft(self, workflow, mock_gateway, entry_log):
        """Test an unauthorized response fails the submit step without logging"""
        mock_gateway.create_page.side_effect = UpstreamError("Unauthorized", status=401)
        upload(workflow, mock_gateway)
        workflow.edit_draft(title='Kept title')

        snapshot = workflow.submit(mock_gateway)

        assert snapshot['state'] == 'error'
        assert snapshot['failed_step'] == 'submit'
        assert 'Unauthorized' in snapshot['error']
        assert snapshot['draft']['title'] == 'Kept title'
        assert len(entry_log) == 0

    def test_save_locally(self, workflow, mock_gateway, entry_log):
        """Test a local save logs an entry without any remote page"""
        upload(workflow, mock_gateway)
        workflow.edit_draft(title='T', date='2026-03-14')

        snapshot = workflow.save_locally()

        assert snapshot['state'] == 'done'
        assert len(entry_log) == 1
        entry = entry_log.all()[0]
        assert entry.id.startswith('local-')
        assert entry.title == 'T'
        assert entry.date == date(2026, 3, 14)
        assert entry.tags == ()
        assert entry.remote_url is None
        mock_gateway.create_page.assert_not_called()

    def test_submit_outside_review_conflicts(self, workflow, mock_gateway):
        with pytest.raises(ConflictError):
            workflow.submit(mock_gateway)
        with pytest.raises(ConflictError):
            workflow.save_locally()


class TestRecovery:
    """Test retry, reset and error dismissal"""

    def test_retry_ocr(self, workflow, mock_gateway):
        mock_gateway.submit_ocr.side_effect = [UpstreamError("Request timed out"),
                                               {'text': 'Second try'}]
        upload(workflow, mock_gateway)

        snapshot = workflow.retry(mock_gateway)

        assert snapshot['state'] == 'review_ready'
        assert snapshot['draft']['ocr_text'] == 'Second try'
        assert snapshot['error'] is None
        assert mock_gateway.submit_ocr.call_count == 2

    def test_retry_submit_uses_retained_draft(self, workflow, mock_gateway, entry_log):
        """Test a submit retry resends the same edited draft"""
        mock_gateway.create_page.side_effect = [UpstreamError("Unauthorized", status=401),
                                                mock_gateway.create_page.return_value]
        upload(workflow, mock_gateway)
        workflow.edit_draft(title='Retried')
        workflow.submit(mock_gateway)

        snapshot = workflow.retry(mock_gateway)

        assert snapshot['state'] == 'done'
        assert entry_log.all()[0].title == 'Retried'

    def test_retry_upload_failure_conflicts(self, workflow, mock_gateway):
        upload(workflow, mock_gateway, content=b'')

        with pytest.raises(ConflictError, match='Select the image again'):
            workflow.retry(mock_gateway)

    def test_retry_without_failure_conflicts(self, workflow, mock_gateway):
        with pytest.raises(ConflictError):
            workflow.retry(mock_gateway)

    def test_reset_from_review(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        snapshot = workflow.reset()

        assert snapshot['state'] == 'idle'
        assert snapshot['draft'] is None
        assert isinstance(workflow.state, Idle)

    def test_reset_from_done_allows_next_scan(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)
        workflow.save_locally()
        workflow.reset()

        snapshot = upload(workflow, mock_gateway)

        assert snapshot['state'] == 'review_ready'

    def test_reset_while_busy_conflicts(self, workflow, mock_gateway):
        """Test a reset is refused while a request is in flight"""
        def reset_during_submit(page):
            with pytest.raises(ConflictError):
                workflow.reset()
            return mock_gateway.create_page.return_value

        mock_gateway.create_page.side_effect = reset_during_submit
        upload(workflow, mock_gateway)

        snapshot = workflow.submit(mock_gateway)

        assert snapshot['state'] == 'done'

    def test_dismiss_error_keeps_failed_state(self, workflow, mock_gateway):
        """Test dismissing the banner leaves the failed step retryable"""
        mock_gateway.create_page.side_effect = UpstreamError("Unauthorized", status=401)
        upload(workflow, mock_gateway)
        workflow.submit(mock_gateway)

        snapshot = workflow.dismiss_error()

        assert snapshot['error'] is None
        assert snapshot['state'] == 'error'
        assert snapshot['failed_step'] == 'submit'


class TestStateData:
    """Test each state carries only its own data"""

    def test_review_ready_holds_capture_and_draft(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)

        assert isinstance(workflow.state, ReviewReady)
        assert workflow.state.capture.captured_at == FIXED_NOW

    def test_done_holds_entry_only(self, workflow, mock_gateway):
        upload(workflow, mock_gateway)
        workflow.save_locally()

        assert isinstance(workflow.state, Done)
        assert not hasattr(workflow.state, 'draft')

    def test_independent_workflows(self, entry_log, mock_gateway):
        first = ScanWorkflow(entry_log, demo_delay=0, clock=lambda: FIXED_NOW)
        second = ScanWorkflow(entry_log, demo_delay=0, clock=lambda: FIXED_NOW)

        upload(first, mock_gateway)

        assert second.snapshot()['state'] == 'idle'
