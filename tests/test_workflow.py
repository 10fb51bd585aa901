"""Tests for the file-level merge and model diff workflow."""

import os

import pytest

from scaffold_merger.config import Config
from scaffold_merger.workflow import (
    diff_model_directories, merge_context_files, read_source, write_source,
)


OLD_CONTEXT = """\
public partial class ShopContext : DbContext
{
    protected override void OnModelCreating(ModelBuilder modelBuilder)
    {
        modelBuilder.HasDefaultSchema("sales");

        modelBuilder.Entity<Customer>(entity =>
        {
            entity.HasKey(e => e.Id);
        });

        OnModelCreatingPartial(modelBuilder);
    }

    partial void OnModelCreatingPartial(ModelBuilder modelBuilder);
}
"""

NEW_CONTEXT = """\
public partial class ShopContext : DbContext
{
    protected override void OnModelCreating(ModelBuilder modelBuilder)
    {
        modelBuilder.Entity<Customer>(entity =>
        {
            entity.HasKey(e => e.Id);
            entity.Property(e => e.Email).HasMaxLength(200);
        });

        OnModelCreatingPartial(modelBuilder);
    }

    partial void OnModelCreatingPartial(ModelBuilder modelBuilder);
}
"""


@pytest.fixture
def context_files(tmp_path):
    old = tmp_path / "old" / "ShopContext.cs"
    new = tmp_path / "new" / "ShopContext.cs"
    old.parent.mkdir()
    new.parent.mkdir()
    old.write_text(OLD_CONTEXT, encoding="utf-8")
    new.write_text(NEW_CONTEXT, encoding="utf-8")
    return str(old), str(new)


class TestSourceIO:
    def test_bom_dropped_and_crlf_kept(self, tmp_path):
        path = tmp_path / "a.cs"
        path.write_bytes(b"\xef\xbb\xbfline1\r\nline2\r\n")
        assert read_source(str(path)) == "line1\r\nline2\r\n"

    def test_atomic_write_replaces_file(self, tmp_path):
        path = tmp_path / "a.cs"
        path.write_text("old", encoding="utf-8")
        write_source(str(path), "new\r\ncontent")

        assert path.read_bytes() == b"new\r\ncontent"
        assert not os.path.exists(str(path) + ".scaffoldmerge_tmp")


class TestMergeContextFiles:
    def test_overwrites_new_file(self, context_files):
        old, new = context_files
        result = merge_context_files(old, new)

        assert result.success is True
        merged = read_source(new)
        assert 'modelBuilder.HasDefaultSchema("sales");' in merged
        assert "HasMaxLength(200)" in merged
        # Old file untouched
        assert read_source(old) == OLD_CONTEXT

    def test_output_path(self, context_files, tmp_path):
        old, new = context_files
        out = tmp_path / "merged.cs"
        result = merge_context_files(old, new, str(out))

        assert result.success is True
        assert read_source(new) == NEW_CONTEXT
        assert read_source(str(out)) == result.merged_text

    def test_failure_writes_nothing(self, context_files, tmp_path):
        old, new = context_files
        with open(old, "w", encoding="utf-8") as f:
            f.write("public class Broken { }")
        out = tmp_path / "merged.cs"

        result = merge_context_files(old, new, str(out))

        assert result.success is False
        assert not out.exists()
        assert read_source(new) == NEW_CONTEXT

    def test_unchanged_file_not_rewritten(self, context_files):
        _, new = context_files
        before = os.stat(new).st_mtime_ns
        result = merge_context_files(new, new)

        assert result.success is True
        assert result.changed is False
        assert os.stat(new).st_mtime_ns == before


CUSTOMER_V1 = """\
public partial class Customer
{
    public int Id { get; set; }
    public string Name { get; set; } = null!;
    public string Fax { get; set; } = null!;
}
"""

CUSTOMER_V2 = """\
public partial class Customer
{
    public int Id { get; set; }
    public string? Name { get; set; }
    public string Email { get; set; } = null!;
}
"""

INVOICE = """\
public partial class Invoice
{
    public int Id { get; set; }
    public decimal Total { get; set; }
}
"""

LEGACY = """\
public partial class LegacyLog
{
    public int Id { get; set; }
}
"""


@pytest.fixture
def model_dirs(tmp_path):
    old_dir = tmp_path / "old_models"
    new_dir = tmp_path / "new_models"
    old_dir.mkdir()
    new_dir.mkdir()
    (old_dir / "Customer.cs").write_text(CUSTOMER_V1, encoding="utf-8")
    (old_dir / "LegacyLog.cs").write_text(LEGACY, encoding="utf-8")
    (old_dir / "ShopContext.cs").write_text(OLD_CONTEXT, encoding="utf-8")
    (new_dir / "Customer.cs").write_text(CUSTOMER_V2, encoding="utf-8")
    (new_dir / "Invoice.cs").write_text(INVOICE, encoding="utf-8")
    (new_dir / "ShopContext.cs").write_text(NEW_CONTEXT, encoding="utf-8")
    (new_dir / "notes.txt").write_text("ignored", encoding="utf-8")
    return str(old_dir), str(new_dir)


class TestDiffModelDirectories:
    def test_report(self, model_dirs):
        old_dir, new_dir = model_dirs
        report = diff_model_directories(old_dir, new_dir)

        assert report.added_entities == ["Invoice"]
        assert report.removed_entities == ["LegacyLog"]
        assert set(report.entities) == {"Customer", "Invoice"}
        assert "ShopContext" not in report.entities

        customer = report.entities["Customer"]
        assert [p.name for p in customer.added] == ["Email"]
        assert [p.name for p in customer.removed] == ["Fax"]
        assert [(c.name, c.from_type, c.to_type) for c in customer.changed] == [
            ("Name", "string", "string?"),
        ]
        assert [p.name for p in report.entities["Invoice"].added] == ["Id", "Total"]

        assert report.total_properties_added == 3
        assert report.total_properties_removed == 1
        assert report.total_properties_changed == 1

    def test_context_file_excluded_by_name(self, model_dirs):
        old_dir, new_dir = model_dirs
        cfg = Config()
        cfg.CONTEXT_FILE = "Customer.cs"
        report = diff_model_directories(old_dir, new_dir, cfg)
        assert "Customer" not in report.entities

    def test_missing_directory(self, tmp_path, model_dirs):
        _, new_dir = model_dirs
        report = diff_model_directories(str(tmp_path / "absent"), new_dir)
        assert report.added_entities == ["Customer", "Invoice"]
        assert report.removed_entities == []
