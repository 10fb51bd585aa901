"""Tests for removing generated entity configuration blocks."""

import pytest

from scaffold_merger.engine.braces import is_balanced
from scaffold_merger.engine.entity_blocks import (
    entity_anchor, find_entity_blocks, strip_entity_blocks,
)
from scaffold_merger.engine.errors import UnbalancedBracesError


ANCHOR = entity_anchor("modelBuilder")

GENERATED_BODY = """
        modelBuilder.HasDefaultSchema("sales");

        modelBuilder.Entity<Customer>(entity =>
        {
            entity.HasKey(e => e.Id);
            entity.Property(e => e.Name).HasMaxLength(100);
        });

        modelBuilder.Entity<Order>(entity =>
        {
            entity.HasOne(d => d.Customer).WithMany(p => p.Orders)
                .HasForeignKey(d => d.CustomerId);
        });

        modelBuilder.ApplyConfiguration(new AuditConfiguration());

        OnModelCreatingPartial(modelBuilder);
    """


class TestStripEntityBlocks:
    def test_single_statement_removed(self):
        body = (
            'modelBuilder.Entity<Foo>(e => { e.HasKey(x => x.Id); });\n'
            'modelBuilder.HasDefaultSchema("app");'
        )
        assert strip_entity_blocks(body, ANCHOR) == 'modelBuilder.HasDefaultSchema("app");'

    def test_generated_body(self):
        result = strip_entity_blocks(GENERATED_BODY, ANCHOR)

        assert "Entity<" not in result
        assert "HasKey" not in result
        assert "HasForeignKey" not in result
        assert 'modelBuilder.HasDefaultSchema("sales");' in result
        assert "modelBuilder.ApplyConfiguration(new AuditConfiguration());" in result
        assert "OnModelCreatingPartial(modelBuilder);" in result
        assert is_balanced(result)

    def test_blank_lines_collapse(self):
        result = strip_entity_blocks(GENERATED_BODY, ANCHOR)
        assert "\n\n\n" not in result
        assert result == (
            '\n        modelBuilder.HasDefaultSchema("sales");\n'
            "\n        modelBuilder.ApplyConfiguration(new AuditConfiguration());\n"
            "\n        OnModelCreatingPartial(modelBuilder);\n    "
        )

    def test_anchor_is_case_insensitive(self):
        body = "ModelBuilder.entity<Foo>(e => { });\nkeep();\n"
        assert strip_entity_blocks(body, ANCHOR) == "keep();\n"

    def test_nested_lambdas_removed_whole(self):
        body = (
            "modelBuilder.Entity<Foo>(entity =>\n"
            "{\n"
            "    entity.OwnsOne(e => e.Address, a =>\n"
            "    {\n"
            "        a.Property(p => p.City);\n"
            "    });\n"
            "});\n"
            "custom();\n"
        )
        assert strip_entity_blocks(body, ANCHOR) == "custom();\n"

    def test_block_sharing_line_with_other_code(self):
        body = "before(); modelBuilder.Entity<Foo>(e => { }); after();\n"
        assert strip_entity_blocks(body, ANCHOR) == "before();  after();\n"

    def test_inner_lambda_closes_every_paren(self):
        body = "modelBuilder.Entity<Foo>(e => e.Configure(x => { x.A(); }));\nkeep();\n"
        result = strip_entity_blocks(body, ANCHOR)
        assert result == "keep();\n"
        assert is_balanced(result)

    def test_anchor_without_lambda_left_in_place(self):
        body = "modelBuilder.Entity<Foo>().ToTable(\"foo\");\nmodelBuilder.Entity<Bar>(e => { });\n"
        assert strip_entity_blocks(body, ANCHOR) == "modelBuilder.Entity<Foo>().ToTable(\"foo\");\n"

    def test_unterminated_anchor_kept_verbatim(self):
        body = "keep();\nmodelBuilder.Entity<Foo>(e =>\n\n\n   dangling"
        assert strip_entity_blocks(body, ANCHOR) == body

    def test_text_after_malformed_anchor_still_scanned(self):
        body = (
            "modelBuilder.Entity<Foo>().HasNoKey();\n"
            "modelBuilder.Entity<Bar>(e => { e.HasKey(x => x.Id); });\n"
            "tail();\n"
        )
        assert strip_entity_blocks(body, ANCHOR) == "modelBuilder.Entity<Foo>().HasNoKey();\ntail();\n"

    def test_block_inside_multi_argument_call_kept_whole(self):
        body = (
            "modelBuilder.Entity<Role>().HasData(new Role { Id = 1 }, new Role { Id = 2 });\n"
            "keep();\n"
        )
        assert strip_entity_blocks(body, ANCHOR) == body
        assert find_entity_blocks(body, ANCHOR) == []

    def test_scan_continues_after_multi_argument_call(self):
        body = (
            "modelBuilder.Entity<Role>().HasData(new Role { Id = 1 }, new Role { Id = 2 });\n"
            "modelBuilder.Entity<Bar>(e => { e.HasKey(x => x.Id); });\n"
            "keep();\n"
        )
        assert strip_entity_blocks(body, ANCHOR) == (
            "modelBuilder.Entity<Role>().HasData(new Role { Id = 1 }, new Role { Id = 2 });\n"
            "keep();\n"
        )

    def test_unbalanced_lambda_raises(self):
        with pytest.raises(UnbalancedBracesError):
            strip_entity_blocks("modelBuilder.Entity<Foo>(e => { e.HasKey(x => x.Id);", ANCHOR)

    def test_crlf_line_endings(self):
        body = "a();\r\nmodelBuilder.Entity<Foo>(e => { });\r\nb();\r\n"
        assert strip_entity_blocks(body, ANCHOR) == "a();\r\nb();\r\n"

    def test_other_builder_name_not_matched(self):
        body = "builder.Entity<Foo>(e => { });\n"
        assert strip_entity_blocks(body, ANCHOR) == body


class TestFindEntityBlocks:
    def test_reports_block_offsets(self):
        body = "x();\nmodelBuilder.Entity<Foo>(e => { e.A(); });\ny();"
        blocks = find_entity_blocks(body, ANCHOR)

        assert len(blocks) == 1
        block = blocks[0]
        assert block.anchor_span.start == body.index("modelBuilder")
        assert body[block.lambda_open_brace] == "{"
        assert body[block.lambda_close_brace] == "}"
        assert body[block.statement_end - 1] == ";"
        assert body[block.statement_end:] == "\ny();"

    def test_generated_body_block_count(self):
        assert len(find_entity_blocks(GENERATED_BODY, ANCHOR)) == 2

    def test_no_anchor(self):
        assert find_entity_blocks("a(); b();", ANCHOR) == []
