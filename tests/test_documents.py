"""Tests for document reference resolution and the document editors."""

import json
import subprocess
from unittest.mock import MagicMock

import pytest
import requests

from ai_secretary.config import Config
from ai_secretary.documents import (
    FilesystemEditor, GithubIssueEditor, LoadError, SaveConflictError,
    SaveError, UnsupportedReferenceError, WikiEditor, get_document_editor,
    wiki_page_ref,
)
from ai_secretary.documents import filesystem


class TestReferenceResolution:
    @pytest.mark.parametrize("ref", [
        "/tmp/page.md", "./page.md", "../docs/page.md", "C:\\docs\\page.md",
    ])
    def test_file_paths(self, ref):
        editor = get_document_editor(ref, Config())
        assert isinstance(editor, FilesystemEditor)
        assert editor.path == ref

    @pytest.mark.parametrize("ref,page", [
        ("Wiki/OnsenJS", "Wiki/OnsenJS"),
        ("https://creatorsgarten.org/wiki/OnsenJS", "OnsenJS"),
        ("https://creatorsgarten.org/wiki/Events/bkkjs22", "Events/bkkjs22"),
        ("https://creatorsgarten.org/event/bkkjs22", "Events/bkkjs22"),
    ])
    def test_wiki_references(self, ref, page):
        assert wiki_page_ref(ref) == page
        editor = get_document_editor(ref, Config())
        assert isinstance(editor, WikiEditor)
        assert editor.page_ref == page

    def test_github_issue(self):
        url = "https://github.com/owner/repo-name/issues/42"
        editor = get_document_editor(url, Config())
        assert isinstance(editor, GithubIssueEditor)
        assert editor.issue_url == url

    @pytest.mark.parametrize("ref", [
        "", "page.md", "https://example.com/wiki/x",
        "https://github.com/owner/repo/pull/1",
    ])
    def test_unsupported(self, ref):
        with pytest.raises(UnsupportedReferenceError):
            get_document_editor(ref, Config())


class TestFilesystemEditor:
    def test_load_and_save(self, tmp_path):
        path = tmp_path / "doc.md"
        path.write_text("hello\r\n", encoding="utf-8")
        editor = FilesystemEditor(str(path))

        assert editor.load() == "hello\n"
        editor.save("bye\n")
        assert path.read_bytes() == b"bye\n"

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            FilesystemEditor(str(tmp_path / "nope.md")).load()

    def test_save_into_missing_directory(self, tmp_path):
        editor = FilesystemEditor(str(tmp_path / "missing" / "doc.md"))
        with pytest.raises(SaveError):
            editor.save("x")

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "doc.md"
        path.write_text("old", encoding="utf-8")

        def failing_replace(src, dst):
            raise PermissionError("locked")

        monkeypatch.setattr(filesystem.os, "replace", failing_replace)
        with pytest.raises(SaveError):
            FilesystemEditor(str(path)).save("new")
        assert path.read_text(encoding="utf-8") == "old"
        assert not (tmp_path / "doc.md.tmp").exists()


def _wiki_view_response(content="# Page", revision="rev-1"):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        "result": {"data": {"file": {"content": content, "revision": revision}}}}
    return response


class TestWikiEditor:
    def _editor(self):
        return WikiEditor("Wiki/Test", api_url="https://wiki.example.com/api/cg/",
                          auth_token="tok")

    def test_load_remembers_revision(self, monkeypatch):
        get = MagicMock(return_value=_wiki_view_response())
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get", get)
        editor = self._editor()

        assert editor.load() == "# Page"
        assert editor.revision == "rev-1"
        assert get.call_args.args[0] == "https://wiki.example.com/api/cg/view"
        query = json.loads(get.call_args.kwargs["params"]["input"])
        assert query == {"pageRef": "Wiki/Test", "withFile": True,
                         "revalidate": True, "render": False}
        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_load_missing_file(self, monkeypatch):
        response = _wiki_view_response()
        response.json.return_value = {"result": {"data": {"file": None}}}
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get",
                            MagicMock(return_value=response))
        with pytest.raises(LoadError):
            self._editor().load()

    def test_load_transport_error(self, monkeypatch):
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get",
                            MagicMock(side_effect=requests.ConnectionError("down")))
        with pytest.raises(LoadError):
            self._editor().load()

    def test_save_sends_old_revision(self, monkeypatch):
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get",
                            MagicMock(return_value=_wiki_view_response()))
        post = MagicMock(return_value=MagicMock(status_code=200, text="{}"))
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.post", post)
        editor = self._editor()
        editor.load()

        editor.save("# New")

        assert post.call_args.args[0] == "https://wiki.example.com/api/cg/save"
        assert post.call_args.kwargs["json"] == {
            "pageRef": "Wiki/Test", "newContent": "# New", "oldRevision": "rev-1"}

    def test_save_without_load(self):
        with pytest.raises(SaveError):
            self._editor().save("x")

    def test_save_conflict(self, monkeypatch):
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get",
                            MagicMock(return_value=_wiki_view_response()))
        monkeypatch.setattr(
            "ai_secretary.documents.wiki.requests.post",
            MagicMock(return_value=MagicMock(status_code=409, text="conflict")))
        editor = self._editor()
        editor.load()
        with pytest.raises(SaveConflictError):
            editor.save("x")

    def test_save_server_error(self, monkeypatch):
        monkeypatch.setattr("ai_secretary.documents.wiki.requests.get",
                            MagicMock(return_value=_wiki_view_response()))
        monkeypatch.setattr(
            "ai_secretary.documents.wiki.requests.post",
            MagicMock(return_value=MagicMock(status_code=500, text="oops")))
        editor = self._editor()
        editor.load()
        with pytest.raises(SaveError) as exc_info:
            editor.save("x")
        assert not isinstance(exc_info.value, SaveConflictError)


class TestGithubIssueEditor:
    URL = "https://github.com/o/r/issues/1"

    def test_load(self, monkeypatch):
        run = MagicMock(return_value=subprocess.CompletedProcess(
            args=[], returncode=0, stdout="Issue body", stderr=""))
        monkeypatch.setattr("ai_secretary.documents.github_issue.subprocess.run", run)

        assert GithubIssueEditor(self.URL).load() == "Issue body"
        assert run.call_args.args[0] == [
            "gh", "issue", "view", self.URL, "--json", "body",
            "--template", "{{ .body }}"]

    def test_save(self, monkeypatch):
        run = MagicMock(return_value=subprocess.CompletedProcess(
            args=[], returncode=0, stdout="", stderr=""))
        monkeypatch.setattr("ai_secretary.documents.github_issue.subprocess.run", run)

        GithubIssueEditor(self.URL).save("New body")
        assert run.call_args.args[0] == ["gh", "issue", "edit", self.URL,
                                         "--body", "New body"]

    def test_gh_failure(self, monkeypatch):
        run = MagicMock(return_value=subprocess.CompletedProcess(
            args=[], returncode=1, stdout="", stderr="not found"))
        monkeypatch.setattr("ai_secretary.documents.github_issue.subprocess.run", run)
        with pytest.raises(LoadError):
            GithubIssueEditor(self.URL).load()
        with pytest.raises(SaveError):
            GithubIssueEditor(self.URL).save("x")

    def test_gh_missing(self, monkeypatch):
        monkeypatch.setattr("ai_secretary.documents.github_issue.subprocess.run",
                            MagicMock(side_effect=FileNotFoundError("gh")))
        with pytest.raises(LoadError):
            GithubIssueEditor(self.URL).load()
