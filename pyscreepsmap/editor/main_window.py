"""Main window for the PyScreepsMap viewer."""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QSettings
from PyQt6.QtGui import QAction, QKeySequence, QCloseEvent
from PyQt6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QGroupBox,
    QFormLayout,
    QLineEdit,
    QComboBox,
    QSpinBox,
    QDoubleSpinBox,
    QPushButton,
    QStackedWidget,
    QStatusBar,
    QMessageBox,
    QLabel,
)

from pyscreepsmap.config import SHARDS, Config, get_config
from pyscreepsmap.data.demo import build_demo, centered_view
from pyscreepsmap.editor.map_canvas import MapCanvas, MarkerTooltip, QtSurfaceFactory
from pyscreepsmap.engine.host import MapScene
from pyscreepsmap.engine.lod import LevelOfDetailSelector
from pyscreepsmap.engine.markers import Marker, MarkerKind, MarkerSelection, create_marker
from pyscreepsmap.engine.projection import Rect
from pyscreepsmap.engine.terrain import (
    CachedTerrainSource,
    RoomTerrain,
    TerrainCache,
    TerrainError,
    TerrainSource,
    load_rooms,
)
from pyscreepsmap.engine.view import ViewState

logger = logging.getLogger(__name__)

# Wide enough for any room a shard can have
POSITION_RANGE = 1000.0


class MainWindow(QMainWindow):
    """Main application window: forms on the left, map on the right."""

    def __init__(
        self,
        config: Optional[Config] = None,
        terrain_source: Optional[TerrainSource] = None,
    ) -> None:
        super().__init__()
        self.config = config or get_config()
        self.setWindowTitle("PyScreepsMap")
        self.setMinimumSize(self.config.viewer.width, self.config.viewer.height)

        # Map state owned by the window
        self.rooms: list[RoomTerrain] = []
        self.markers: list[Marker] = []
        viewer = self.config.viewer
        self.view = ViewState(viewer.initial_x, viewer.initial_y, viewer.initial_scale)
        self.lod = LevelOfDetailSelector(self.config.map)

        self._terrain_source = terrain_source
        self._cache: Optional[TerrainCache] = None

        # Settings
        self.settings = QSettings("PyScreepsMap", "Viewer")

        # Set up UI
        self._setup_ui()
        self._setup_menus()
        self._setup_statusbar()
        self._restore_geometry()

        self.map_scene = MapScene(
            self.config.map,
            self.config.colors,
            QtSurfaceFactory(self.map_canvas),
            on_view_changed=self._on_map_view_changed,
            on_selection_changed=self._on_selection_changed,
            host_rect=self._canvas_host_rect,
        )
        self.map_canvas.resized.connect(self._on_canvas_resized)
        self._sync_view_inputs()

    # === UI ===

    def _setup_ui(self) -> None:
        """Set up the main UI layout."""
        central = QWidget()
        self.setCentralWidget(central)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(6, 6, 6, 6)

        controls = QWidget()
        controls.setFixedWidth(320)
        controls_layout = QVBoxLayout(controls)
        controls_layout.setContentsMargins(0, 0, 0, 0)
        controls_layout.addWidget(self._create_terrain_group())
        controls_layout.addWidget(self._create_marker_group())
        controls_layout.addWidget(self._create_view_group())
        controls_layout.addStretch()
        layout.addWidget(controls)

        # Map area: placeholder until rooms are loaded
        self.map_stack = QStackedWidget()
        placeholder = QLabel("Enter a room name and fetch terrain to begin")
        placeholder.setAlignment(Qt.AlignmentFlag.AlignCenter)
        placeholder.setStyleSheet("color: #9ca3af; font-size: 16px;")
        self.map_stack.addWidget(placeholder)

        self.map_host = QWidget()
        host_layout = QVBoxLayout(self.map_host)
        host_layout.setContentsMargins(0, 0, 0, 0)
        self.map_canvas = MapCanvas(self.map_host)
        host_layout.addWidget(self.map_canvas)
        self.tooltip = MarkerTooltip(self.map_host)
        self.tooltip.closed.connect(self._close_tooltip)
        self.map_stack.addWidget(self.map_host)

        layout.addWidget(self.map_stack, 1)

    def _create_terrain_group(self) -> QGroupBox:
        """Room name, shard and load buttons."""
        group = QGroupBox("Terrain")
        form = QFormLayout(group)

        self.room_input = QLineEdit(self.config.viewer.default_room)
        self.room_input.setPlaceholderText("e.g. W0N0")
        self.room_input.textChanged.connect(self._update_fetch_enabled)
        form.addRow("Room:", self.room_input)

        self.shard_combo = QComboBox()
        for shard in SHARDS:
            self.shard_combo.addItem(f"Shard {shard[-1]}", shard)
        index = self.shard_combo.findData(self.config.terrain.shard)
        self.shard_combo.setCurrentIndex(max(0, index))
        form.addRow("Shard:", self.shard_combo)

        buttons = QHBoxLayout()
        self.fetch_button = QPushButton("Fetch Terrain")
        self.fetch_button.clicked.connect(self._fetch_terrain)
        buttons.addWidget(self.fetch_button)
        self.demo_button = QPushButton("Demo")
        self.demo_button.clicked.connect(self._load_demo)
        buttons.addWidget(self.demo_button)
        form.addRow(buttons)
        return group

    def _create_marker_group(self) -> QGroupBox:
        """Building type, target room and tile position."""
        group = QGroupBox("Buildings")
        form = QFormLayout(group)

        self.kind_combo = QComboBox()
        for kind in MarkerKind:
            self.kind_combo.addItem(kind.label, kind)
        form.addRow("Type:", self.kind_combo)

        self.marker_room_combo = QComboBox()
        self.marker_room_combo.addItem("Load a map first", "")
        form.addRow("Room:", self.marker_room_combo)

        max_local = self.config.map.max_local
        self.marker_x = QSpinBox()
        self.marker_x.setRange(0, max_local)
        self.marker_x.setValue(25)
        form.addRow("X:", self.marker_x)
        self.marker_y = QSpinBox()
        self.marker_y.setRange(0, max_local)
        self.marker_y.setValue(25)
        form.addRow("Y:", self.marker_y)

        self.add_marker_button = QPushButton("Add Building")
        self.add_marker_button.setEnabled(False)
        self.add_marker_button.clicked.connect(self._add_marker)
        form.addRow(self.add_marker_button)
        return group

    def _create_view_group(self) -> QGroupBox:
        """Typed view position and scale."""
        group = QGroupBox("View")
        form = QFormLayout(group)

        self.pos_x_input = QDoubleSpinBox()
        self.pos_y_input = QDoubleSpinBox()
        for spin in (self.pos_x_input, self.pos_y_input):
            spin.setDecimals(3)
            spin.setSingleStep(0.001)
            spin.setRange(-POSITION_RANGE, POSITION_RANGE)
            spin.valueChanged.connect(self._on_view_inputs_changed)
        form.addRow("pos.x:", self.pos_x_input)
        form.addRow("pos.y:", self.pos_y_input)

        self.scale_input = QDoubleSpinBox()
        self.scale_input.setDecimals(2)
        self.scale_input.setSingleStep(0.01)
        self.scale_input.setRange(0, self.config.map.max_scale * 10)
        self.scale_input.valueChanged.connect(self._on_view_inputs_changed)
        form.addRow("scale:", self.scale_input)

        threshold = self.config.map.detail_threshold
        hint = QLabel(
            f"scale > {threshold:g} shows room detail, "
            f"scale ≤ {threshold:g} shows one dot per room"
        )
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #9ca3af;")
        form.addRow(hint)
        return group

    def _setup_menus(self) -> None:
        """Set up the menu bar."""
        menubar = self.menuBar()
        menubar.setNativeMenuBar(False)

        file_menu = menubar.addMenu("&File")

        self.action_demo = QAction("Load &Demo", self)
        self.action_demo.setShortcut(QKeySequence("Ctrl+D"))
        self.action_demo.triggered.connect(self._load_demo)
        file_menu.addAction(self.action_demo)

        file_menu.addSeparator()

        self.action_quit = QAction("&Quit", self)
        self.action_quit.setShortcut(QKeySequence.StandardKey.Quit)
        self.action_quit.triggered.connect(self.close)
        file_menu.addAction(self.action_quit)

        help_menu = menubar.addMenu("&Help")
        self.action_about = QAction("&About", self)
        self.action_about.triggered.connect(self._show_about)
        help_menu.addAction(self.action_about)

    def _setup_statusbar(self) -> None:
        """Set up the status bar."""
        self.statusbar = QStatusBar()
        self.setStatusBar(self.statusbar)

        self.status_rooms = QLabel("Rooms: 0")
        self.status_markers = QLabel("Buildings: 0")
        self.status_mode = QLabel("Mode: overview")

        self.statusbar.addPermanentWidget(self.status_rooms)
        self.statusbar.addPermanentWidget(self.status_markers)
        self.statusbar.addPermanentWidget(self.status_mode)

        self.statusbar.showMessage("Ready")

    def _restore_geometry(self) -> None:
        """Restore window geometry from settings."""
        geometry = self.settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Release the surface and the cache on close."""
        self.settings.setValue("geometry", self.saveGeometry())
        self.map_scene.teardown()
        if self._cache is not None:
            self._cache.close()
        event.accept()

    # === Map updates ===

    def _render(self) -> None:
        """Rebuild the scene from the current rooms, markers and view."""
        self._close_tooltip()
        self.map_stack.setCurrentIndex(1 if self.rooms else 0)
        size = (float(self.map_canvas.width()), float(self.map_canvas.height()))
        self.map_scene.render_scene(self.rooms, self.markers, self.view, size)
        self._update_status()

    def _update_status(self) -> None:
        """Update status bar counts."""
        self.status_rooms.setText(f"Rooms: {len(self.rooms)}")
        self.status_markers.setText(f"Buildings: {len(self.markers)}")
        self.status_mode.setText(f"Mode: {self.lod.mode(self.view.scale).value}")

    def _set_rooms(self, rooms: list[RoomTerrain], markers: list[Marker], view: ViewState) -> None:
        self.rooms = rooms
        self.markers = markers
        self.view = view
        self.marker_room_combo.clear()
        if rooms:
            for room in rooms:
                self.marker_room_combo.addItem(room.room_name, room.room_name)
        else:
            self.marker_room_combo.addItem("Load a map first", "")
        self.add_marker_button.setEnabled(bool(rooms))
        self._sync_view_inputs()
        self._render()

    # === Actions ===

    def _update_fetch_enabled(self, text: str) -> None:
        self.fetch_button.setEnabled(bool(text.strip()))

    def _get_terrain_source(self) -> TerrainSource:
        if self._terrain_source is None:
            self._cache = TerrainCache(self.config.terrain.resolved_cache_path())
            self._terrain_source = CachedTerrainSource(self._cache)
        return self._terrain_source

    def _fetch_terrain(self) -> None:
        """Load the neighbourhood of the typed room."""
        room = self.room_input.text().strip()
        shard = self.shard_combo.currentData()
        radius = self.lod.fetch_radius(self.view.scale)

        self.fetch_button.setEnabled(False)
        self.fetch_button.setText("Loading...")
        try:
            rooms, errors = load_rooms(room, radius, shard, self._get_terrain_source())
        except TerrainError as e:
            QMessageBox.warning(self, "Fetch Failed", str(e))
            return
        finally:
            self.fetch_button.setText("Fetch Terrain")
            self.fetch_button.setEnabled(True)

        self._set_rooms(rooms, [], centered_view(room, self.view.scale))
        self.statusbar.showMessage(f"Loaded {len(rooms)} room(s) around {room}")
        if errors:
            QMessageBox.warning(
                self,
                "Some Rooms Failed",
                "Some rooms failed to load:\n" + "\n".join(errors),
            )

    def _load_demo(self) -> None:
        """Show generated terrain with a couple of buildings."""
        demo = build_demo(self.config.map, scale=self.view.scale)
        self.room_input.setText(demo.center_room)
        self._set_rooms(demo.rooms, demo.markers, demo.view)
        self.statusbar.showMessage("Loaded demo map")

    def _add_marker(self) -> None:
        """Place a building from the form."""
        room_name = self.marker_room_combo.currentData()
        if not room_name:
            return
        marker = create_marker(
            self.kind_combo.currentData(),
            room_name,
            self.marker_x.value(),
            self.marker_y.value(),
            room_size=self.config.map.room_size,
        )
        self.markers = [*self.markers, marker]
        self._render()
        self.statusbar.showMessage(f"Added {marker.kind.label} in {room_name}")

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About PyScreepsMap",
            "PyScreepsMap\n\nAssemble Screeps rooms into one map, "
            "pan and zoom across it and plan buildings.",
        )

    # === View sync ===

    def _sync_view_inputs(self) -> None:
        """Show the current view in the form without feeding it back."""
        for spin, value in (
            (self.pos_x_input, self.view.x),
            (self.pos_y_input, self.view.y),
            (self.scale_input, self.view.scale),
        ):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)

    def _on_view_inputs_changed(self, _value: float) -> None:
        self.view = ViewState(
            self.pos_x_input.value(), self.pos_y_input.value(), self.scale_input.value()
        )
        if self.rooms:
            self.map_scene.set_view(self.view)
        self._update_status()

    def _on_map_view_changed(self, view: ViewState) -> None:
        self.view = view
        self._sync_view_inputs()
        self._update_status()

    def _on_canvas_resized(self, width: float, height: float) -> None:
        self.map_scene.resize((width, height))

    # === Tooltip ===

    def _canvas_host_rect(self) -> Rect:
        return Rect(0, 0, self.map_host.width(), self.map_host.height())

    def _on_selection_changed(self, selection: Optional[MarkerSelection]) -> None:
        if selection is None:
            self.tooltip.hide()
            return
        self.tooltip.show_marker(
            selection.marker, selection.anchor, self.config.viewer.tooltip_offset
        )

    def _close_tooltip(self) -> None:
        self.map_scene.clear_selection()
        self.tooltip.hide()
