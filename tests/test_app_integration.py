"""Integration tests for DrawerApp.

The backend client is replaced by the in-memory fake from conftest so the
app mounts without a running backend.
"""

import pytest
from textual.widgets import DataTable, Static, Tree

from dbtree.app import DrawerApp
from dbtree.config import AppConfig, ConnectionSpec
from dbtree.drawer import Drawer
from dbtree.notes import NotesProvider
from dbtree.shell.picker import PickerScreen

pytestmark = pytest.mark.anyio


class TestAppInstantiation:
    def test_app_has_drawer_bindings(self, fake_client):
        app = DrawerApp(client=fake_client)

        binding_keys = [b.key for b in app.BINDINGS]
        assert "ctrl+b" in binding_keys
        assert "f1" in binding_keys
        assert app.active_view == "result"

    async def test_app_can_mount(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            assert app.is_running
            assert app.query_one("#nav-tree", Tree) is not None
            assert app.query_one("#brand", Static) is not None
            assert app.drawer is not None and app.drawer.is_open


class TestDrawerInApp:
    async def test_sections_are_drawn(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            assert app.nav_tree.node_for(NotesProvider.ROOT_ID) is not None
            assert app.nav_tree.node_for(Drawer.HELP_ID).is_expanded
            assert app.nav_tree.node_for(NotesProvider.ADD_ID) is not None

    async def test_configured_connections_appear(self, fake_client):
        config = AppConfig(connections=[ConnectionSpec(name="db1", type="postgres", url="postgres://x")])

        async with DrawerApp(config=config, client=fake_client).run_test() as pilot:
            await pilot.app.workers.wait_for_complete()

            assert pilot.app.nav_tree.node_for("connection_1") is not None
            assert fake_client.registered == [("1", "postgres://x", "postgres")]

    async def test_key_routing_redraws_tree(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            assert app.drawer.handle_key("c", NotesProvider.ROOT_ID) is True
            await pilot.pause()

            assert not app.nav_tree.node_for(NotesProvider.ROOT_ID).is_expanded
            assert app.drawer.model.get(NotesProvider.ROOT_ID).expanded is False

    async def test_widget_collapse_reaches_model(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            app.nav_tree.node_for(Drawer.HELP_ID).collapse()
            await pilot.pause()

            assert app.drawer.model.get(Drawer.HELP_ID).expanded is False

    async def test_toggle_drawer(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            await pilot.press("ctrl+b")
            assert app.nav_tree.display is False

            await pilot.press("ctrl+b")
            assert app.nav_tree.display is True


class TestPicker:
    async def test_escape_cancels_action(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app
            note = app.notes.create_note("a")
            app.drawer.refresh()

            app.drawer.dispatcher.invoke(note.id, 3)
            await pilot.pause()
            assert isinstance(app.screen, PickerScreen)

            await pilot.press("escape")
            await pilot.pause()

            assert not isinstance(app.screen, PickerScreen)
            assert note.id in app.notes.notes

    async def test_choice_runs_action(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app
            note = app.notes.create_note("a")
            app.drawer.refresh()

            app.drawer.dispatcher.invoke(note.id, 3)
            await pilot.pause()
            await app.screen.dismiss("Yes")
            await pilot.pause()

            assert note.id not in app.notes.notes
            assert app.nav_tree.node_for(note.id) is None


class TestThemeSwitching:
    async def test_default_theme_is_night(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            assert "theme-night" in pilot.app.classes

    async def test_can_switch_to_paper_theme(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            await pilot.press("f2")

            assert "theme-paper" in app.classes
            assert "theme-night" not in app.classes

    async def test_plain_theme_drops_icons(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            await pilot.press("f3")
            assert app.drawer.renderer.candies == {}

            await pilot.press("f1")
            assert "table" in app.drawer.renderer.candies


class TestDetailView:
    async def test_errors_log_follows_new_lines(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            await pilot.press("f6")
            app.log_manager.add("errors", "something broke")
            await pilot.pause()

            assert app.active_view == "log:errors"
            assert "something broke" in app.detail_view.shown_text

    async def test_query_result_fills_table(self, fake_client):
        config = AppConfig(connections=[ConnectionSpec(name="db1", type="postgres", url="postgres://x")])

        async with DrawerApp(config=config, client=fake_client).run_test() as pilot:
            app = pilot.app

            app.handler.execute("SELECT 1")
            await app.workers.wait_for_complete()
            await pilot.pause()

            table = app.query_one("#detail-table", DataTable)
            assert table.display is True
            assert table.row_count == 1
            assert app.last_result.query == "SELECT 1"

    async def test_paging_without_connection_reports_error(self, fake_client):
        async with DrawerApp(client=fake_client).run_test() as pilot:
            app = pilot.app

            await pilot.press("ctrl+n")

            assert any("paging failed" in line for line in app.log_manager.lines("errors"))
