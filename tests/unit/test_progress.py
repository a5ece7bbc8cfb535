from __future__ import annotations

from unittest.mock import Mock, patch

from question_import.services.progress import CommitProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestCommitProgress:
    def test_init_with_tty_enabled(self):
        with patch('question_import.services.progress.is_tty_enabled', return_value=True), \
             patch('question_import.services.progress.tqdm') as mock_tqdm:

            progress = CommitProgress(4)

            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=4,
                desc="Committing questions",
                unit="question",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('question_import.services.progress.is_tty_enabled', return_value=False):
            progress = CommitProgress(4)

            assert progress.enabled is False
            assert progress.pbar is None

    def test_zero_total_never_creates_a_bar(self):
        with patch('question_import.services.progress.is_tty_enabled', return_value=True), \
             patch('question_import.services.progress.tqdm') as mock_tqdm:
            progress = CommitProgress(0)

            assert progress.enabled is False
            mock_tqdm.assert_not_called()

    def test_advance_counts_and_updates_bar(self):
        mock_pbar = Mock()

        with patch('question_import.services.progress.is_tty_enabled', return_value=True), \
             patch('question_import.services.progress.tqdm', return_value=mock_pbar):
            progress = CommitProgress(3)
            progress.advance(True)
            progress.advance(False)

            assert (progress.success, progress.failed) == (1, 1)
            assert mock_pbar.update.call_count == 2
            mock_pbar.set_postfix.assert_called_with(success=1, failed=1)

    def test_advance_with_tty_disabled_still_counts(self):
        with patch('question_import.services.progress.is_tty_enabled', return_value=False):
            progress = CommitProgress(2)
            progress.advance(True)

            assert progress.success == 1

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()

        with patch('question_import.services.progress.is_tty_enabled', return_value=True), \
             patch('question_import.services.progress.tqdm', return_value=mock_pbar):
            with CommitProgress(2) as progress:
                assert isinstance(progress, CommitProgress)

            mock_pbar.close.assert_called_once()
            assert progress.pbar is None
