"""Tests for plan rendering and change previews."""

from squadkit.installer import (
    InstallState,
    IntegrationSettings,
    SelectionRequest,
    apply_plan,
    build_plan,
    preview_changes,
    read_install_state,
    render_plan,
    render_preview,
)

from tests.conftest import snapshot


def plan_for(catalog, layout, agents=(), global_count=None):
    state = read_install_state(layout, catalog)
    request = SelectionRequest(agents=frozenset(agents), global_count=global_count)
    return build_plan(state, request, catalog)


class TestRenderPlan:
    def test_summary(self, catalog):
        state = InstallState(agents={"dev-agent-a": 2})
        request = SelectionRequest(
            agents=frozenset({"ops-agent-x"}),
            integration=IntegrationSettings(url="https://f.example.com", account_slug="acme"),
        )
        text = render_plan(build_plan(state, request, catalog), catalog)

        assert "Agents: 4 (2 core + 2 selected)" in text
        assert "dev-agent-a" in text and "x2" in text
        assert "ops-agent-x" in text and "(new)" in text
        assert "Skills: 5 (deduped)" in text
        assert "https://f.example.com (acme)" in text

    def test_existing_agent_not_marked_new(self, catalog):
        state = InstallState(agents={"dev-agent-a": 1})
        text = render_plan(build_plan(state, SelectionRequest(), catalog), catalog)
        assert "(new)" not in text


class TestPreviewChanges:
    def test_fresh_target_creates_everything(self, catalog, layout):
        preview = preview_changes(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        assert preview.has_changes
        created = {c.path for c in preview.by_action("create")}
        assert layout.agents_dir / "dev-agent-a.md" in created
        assert layout.config_file in created
        assert layout.fragment_file("lead") in created
        assert not preview.by_action("update")

    def test_preview_writes_nothing(self, catalog, layout):
        preview_changes(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        assert not layout.root.exists()

    def test_after_install_nothing_changes(self, catalog, layout):
        plan = plan_for(catalog, layout, ["dev-agent-a"])
        apply_plan(plan, layout, catalog)
        preview = preview_changes(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        assert not preview.has_changes

    def test_detects_update_and_remove(self, catalog, layout):
        apply_plan(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        (layout.skills_dir / "old-skill").mkdir()
        (layout.skills_dir / "old-skill" / "SKILL.md").write_text("x\n")
        (layout.agents_dir / "lead-agent.md").write_text("edited\n")
        before = snapshot(layout.root)

        preview = preview_changes(
            plan_for(catalog, layout, ["dev-agent-a"], global_count=3), layout, catalog
        )

        assert {c.path for c in preview.by_action("remove")} == {
            layout.skills_dir / "old-skill" / "SKILL.md"
        }
        updated = {c.path for c in preview.by_action("update")}
        assert layout.agents_dir / "lead-agent.md" in updated
        assert layout.fragment_file("dev-agent-a") in updated
        assert snapshot(layout.root) == before

    def test_render_preview(self, catalog, layout):
        preview = preview_changes(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        text = render_preview(preview, layout)
        assert "[dry-run] Would create: .claude/agents/dev-agent-a.md" in text
        assert "Remove: 0" in text

    def test_limited_to_stages(self, catalog, layout):
        apply_plan(plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog)
        (layout.agents_dir / "lead-agent.md").write_text("edited\n")
        (layout.skills_dir / "s-a" / "SKILL.md").write_text("edited\n")

        preview = preview_changes(
            plan_for(catalog, layout, ["dev-agent-a"]), layout, catalog, ["skills"]
        )

        assert {c.path for c in preview.by_action("update")} == {
            layout.skills_dir / "s-a" / "SKILL.md"
        }
        assert all(c.path.is_relative_to(layout.skills_dir) for c in preview.changes)
