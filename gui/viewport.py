"""
2D OpenGL viewport for the toolpath, with rubber-band selection.
All drawing happens in surface coordinates produced by the viewport mapping.
"""
from PySide6.QtOpenGLWidgets import QOpenGLWidget
from PySide6.QtGui import QColor
from PySide6.QtCore import Qt, QPointF, Signal
from OpenGL.GL import *
from core.toolpath import MoveType
from core.viewport import grid_lines, surface_to_world, world_to_surface

SELECTED_COLOR = '#FF5722'
GRID_COLOR = '#E5E7EB'
AXIS_COLOR = '#64748B'
AXIS_LENGTH = 40


def _rgb(color):
    c = QColor(color)
    return c.redF(), c.greenF(), c.blueF()


class Viewport(QOpenGLWidget):
    """Top-down view of the toolpath of a GCodeDocument."""

    selectionChanged = Signal(list)        # command indices
    cursorMoved = Signal(float, float)     # world coordinates in mm

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMouseTracking(True)

        self.document = None
        self.state = None
        self.segments = []

        # Rubber band in surface coordinates
        self.drag_start = None
        self.drag_end = None

        # Display settings
        self.show_rapid = True
        self.show_grid = True
        self.show_axes = True

    def set_document(self, document):
        self.document = document
        self.refresh()

    def refresh(self):
        """Recompute mapping and segments from the document and repaint."""
        if self.document is None:
            self.state = None
            self.segments = []
        else:
            self.state = self.document.viewport(self.width(), self.height())
            self.segments = self.document.toolpath()
        self.update()

    def initializeGL(self):
        """Setup OpenGL context."""
        glClearColor(1.0, 1.0, 1.0, 1.0)
        glDisable(GL_DEPTH_TEST)
        glEnable(GL_LINE_SMOOTH)
        glEnable(GL_BLEND)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)

    def resizeGL(self, w, h):
        """Surface coordinates: origin top-left, Y down."""
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        glOrtho(0, w, h, 0, -1, 1)
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        self.refresh()

    def paintGL(self):
        glClear(GL_COLOR_BUFFER_BIT)
        if self.state is None or not self.segments:
            return

        if self.show_grid:
            self.draw_grid()
        if self.show_axes:
            self.draw_axes()

        self.draw_toolpath()
        self.draw_rubber_band()

    def draw_grid(self):
        bounds = self.state.bounds
        if bounds is None:
            return
        xs, ys = grid_lines(self.state, self.document.config.grid_target_lines)

        glLineWidth(0.5)
        glColor3f(*_rgb(GRID_COLOR))
        glBegin(GL_LINES)
        for x in xs:
            glVertex2f(*world_to_surface(self.state, x, bounds.min_y))
            glVertex2f(*world_to_surface(self.state, x, bounds.max_y))
        for y in ys:
            glVertex2f(*world_to_surface(self.state, bounds.min_x, y))
            glVertex2f(*world_to_surface(self.state, bounds.max_x, y))
        glEnd()

    def draw_axes(self):
        ox, oy = world_to_surface(self.state, 0, 0)

        glLineWidth(2.0)
        glColor3f(*_rgb(AXIS_COLOR))
        glBegin(GL_LINES)
        # X axis with arrow head
        glVertex2f(ox, oy)
        glVertex2f(ox + AXIS_LENGTH, oy)
        glVertex2f(ox + AXIS_LENGTH - 5, oy - 3)
        glVertex2f(ox + AXIS_LENGTH, oy)
        glVertex2f(ox + AXIS_LENGTH - 5, oy + 3)
        glVertex2f(ox + AXIS_LENGTH, oy)
        # Y axis points up on screen
        glVertex2f(ox, oy)
        glVertex2f(ox, oy - AXIS_LENGTH)
        glVertex2f(ox - 3, oy - AXIS_LENGTH + 5)
        glVertex2f(ox, oy - AXIS_LENGTH)
        glVertex2f(ox + 3, oy - AXIS_LENGTH + 5)
        glVertex2f(ox, oy - AXIS_LENGTH)
        glEnd()

    def draw_toolpath(self):
        # Selected segments last so they stay on top
        for segment in sorted(self.segments, key=lambda s: s.selected):
            if segment.move_type == MoveType.RAPID and not self.show_rapid:
                continue
            self.draw_segment(segment)

    def draw_segment(self, segment):
        if segment.selected:
            glLineWidth(3.0)
            glColor4f(*_rgb(SELECTED_COLOR), 1.0)
        else:
            glLineWidth(2.0)
            glColor4f(*_rgb(segment.color), 0.8)

        dashed = segment.move_type == MoveType.RAPID
        if dashed:
            glLineStipple(1, 0xAAAA)
            glEnable(GL_LINE_STIPPLE)

        glBegin(GL_LINES)
        glVertex2f(*world_to_surface(self.state, *segment.start))
        glVertex2f(*world_to_surface(self.state, *segment.end))
        glEnd()

        if dashed:
            glDisable(GL_LINE_STIPPLE)

    def draw_rubber_band(self):
        if self.drag_start is None or self.drag_end is None:
            return
        x1, y1 = self.drag_start.x(), self.drag_start.y()
        x2, y2 = self.drag_end.x(), self.drag_end.y()

        glColor4f(*_rgb(SELECTED_COLOR), 0.1)
        glBegin(GL_QUADS)
        glVertex2f(x1, y1)
        glVertex2f(x2, y1)
        glVertex2f(x2, y2)
        glVertex2f(x1, y2)
        glEnd()

        glLineWidth(2.0)
        glColor4f(*_rgb(SELECTED_COLOR), 1.0)
        glLineStipple(1, 0xF0F0)
        glEnable(GL_LINE_STIPPLE)
        glBegin(GL_LINE_LOOP)
        glVertex2f(x1, y1)
        glVertex2f(x2, y1)
        glVertex2f(x2, y2)
        glVertex2f(x1, y2)
        glEnd()
        glDisable(GL_LINE_STIPPLE)

    def mousePressEvent(self, event):
        """Start a rubber-band selection."""
        if event.button() == Qt.LeftButton and self.state is not None:
            self.drag_start = QPointF(event.position())
            self.drag_end = QPointF(event.position())
            self.update()

    def mouseMoveEvent(self, event):
        pos = event.position()
        if self.state is not None:
            self.cursorMoved.emit(*surface_to_world(self.state, pos.x(), pos.y()))
        if self.drag_start is not None:
            self.drag_end = QPointF(pos)
            self.update()

    def mouseReleaseEvent(self, event):
        """Select the commands inside the rubber band."""
        if self.drag_start is None or event.button() != Qt.LeftButton:
            return
        if self.document is not None and self.state is not None:
            self.drag_end = QPointF(event.position())
            indices = self.document.select_surface_rect(
                self.state,
                (self.drag_start.x(), self.drag_start.y()),
                (self.drag_end.x(), self.drag_end.y()),
            )
            self.selectionChanged.emit(sorted(indices))

        self.drag_start = None
        self.drag_end = None
        self.refresh()

    def toggle_display_option(self, option):
        """Toggle display options."""
        if option == 'rapid':
            self.show_rapid = not self.show_rapid
        elif option == 'grid':
            self.show_grid = not self.show_grid
        elif option == 'axes':
            self.show_axes = not self.show_axes

        self.update()
