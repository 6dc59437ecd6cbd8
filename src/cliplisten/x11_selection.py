"""X11 selection ownership via python-xlib.

On X11 hosts the listener can act as a clipboard owner itself instead of
shelling out to xsel or xclip. Setting the clipboard means taking ownership
of the CLIPBOARD (or PRIMARY) selection with a hidden window and answering
SelectionRequest events from other applications for as long as we own it.

The display file descriptor is registered with the asyncio event loop via
loop.add_reader(), so requests are answered between sessions without a
separate thread.

The module handles:
- Opening the display and creating the hidden owner window
- Taking selection ownership when text is written
- Responding to SelectionRequest events (TARGETS, UTF8_STRING, STRING, TEXT)

The sink decodes what it is given from the output charset once, then
serves UTF8_STRING as UTF-8 and STRING/TEXT as Latin-1, as ICCCM defines
them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from Xlib import X, Xatom

from cliplisten.sink import Sink, SinkKind, SinkVariant

if TYPE_CHECKING:
    import asyncio

    from Xlib.display import Display
    from Xlib.protocol.event import SelectionRequest
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)

# Fraction of the maximum request size usable for one property write.
PROPERTY_SAFETY_MARGIN: float = 0.9


def open_display(environ: Mapping[str, str]) -> Display | None:
    """Open the X11 display named by DISPLAY.

    Args:
        environ: Environment mapping to read DISPLAY from.

    Returns:
        Display object, or None if DISPLAY is unset or the connection fails.
    """
    display_name = environ.get("DISPLAY")
    if not display_name:
        return None

    try:
        from Xlib.display import Display as XDisplay
        return XDisplay(display_name)
    except Exception as e:
        logger.debug("Failed to connect to X11 display %s: %s", display_name, e)
        return None


def create_hidden_window(display: Display) -> Window:
    """Create a 1x1 unmapped window for selection ownership.

    Args:
        display: The X11 display connection.

    Returns:
        A Window object for owning selections.
    """
    screen = display.screen()
    return screen.root.create_window(
        0, 0, 1, 1, 0, screen.root_depth, event_mask=X.PropertyChangeMask,
    )


def get_max_property_size(display: Display) -> int:
    """Return the largest content in bytes served by a single property write."""
    # max_request_length is in 4-byte units
    max_bytes = display.info.max_request_length * 4  # type: ignore[attr-defined]
    return int(max_bytes * PROPERTY_SAFETY_MARGIN)


def send_selection_notify(display: Display, event: SelectionRequest, prop: int) -> None:
    """Send the SelectionNotify reply for a request."""
    from Xlib.protocol.event import SelectionNotify as SelectionNotifyEvent
    event.requestor.send_event(
        SelectionNotifyEvent(
            time=event.time,
            requestor=event.requestor.id,
            selection=event.selection,
            target=event.target,
            property=prop,
        ),
        event_mask=0,
    )
    display.flush()


def encode_for_target(text: str, target_is_utf8: bool) -> bytes:
    """Encode selection text for UTF8_STRING or for Latin-1 STRING."""
    if target_is_utf8:
        return text.encode("utf-8")
    return text.encode("latin-1", errors="replace")


def handle_selection_request(
    display: Display, event: SelectionRequest, text: str
) -> None:
    """Respond to a SelectionRequest while owning a selection.

    Supports TARGETS, UTF8_STRING, STRING and TEXT. Unsupported targets and
    content too large for a single property write are refused with
    property=None.

    Args:
        display: The X11 display connection.
        event: The SelectionRequest event.
        text: The selection text to serve.
    """
    targets_atom = display.intern_atom("TARGETS")
    utf8_atom = display.intern_atom("UTF8_STRING")
    text_atom = display.intern_atom("TEXT")

    # Obsolete clients pass None and expect the target atom to be used
    prop = event.property if event.property != X.NONE else event.target
    logger.debug("SelectionRequest target=%s prop=%s text_len=%d",
        event.target, prop, len(text))

    if event.target == targets_atom:
        targets = [targets_atom, utf8_atom, Xatom.STRING, text_atom]
        event.requestor.change_property(prop, Xatom.ATOM, 32, targets)
    elif event.target in (utf8_atom, Xatom.STRING, text_atom):
        content = encode_for_target(text, event.target == utf8_atom)
        if len(content) > get_max_property_size(display):
            logger.warning("Refusing selection request: %d bytes exceeds property limit",
                len(content))
            prop = X.NONE
        else:
            target = Xatom.STRING if event.target == text_atom else event.target
            event.requestor.change_property(prop, target, 8, content)
    else:
        prop = X.NONE

    send_selection_notify(display, event, prop)


class X11SelectionSink(Sink):
    """Sink that owns an X11 selection and serves the last written text.

    Args:
        kind: CLIPBOARD or PRIMARY.
        display: Open display connection, owned by the sink from now on.
        loop: Running event loop used to watch the display connection.
        encoding: Charset of the bytes passed to write().
    """

    variant = SinkVariant.NATIVE

    def __init__(
        self,
        kind: SinkKind,
        display: Display,
        loop: asyncio.AbstractEventLoop,
        encoding: str = "utf-8",
    ) -> None:
        super().__init__(kind)
        self.display = display
        self.window = create_hidden_window(display)
        if kind is SinkKind.PRIMARY:
            self.selection_atom = Xatom.PRIMARY
        else:
            self.selection_atom = display.intern_atom("CLIPBOARD")
        self.encoding = encoding
        self.text = ""
        self.owned = False
        self._loop = loop
        self._fd = display.fileno()
        loop.add_reader(self._fd, self.process_pending_events)

    @property
    def label(self) -> str:
        return f"{self.kind.value}:x11"

    def write(self, data: bytes) -> None:
        self.text = data.decode(self.encoding, errors="replace")
        self.window.set_selection_owner(self.selection_atom, X.CurrentTime)
        self.display.flush()

        owner = self.display.get_selection_owner(self.selection_atom)
        self.owned = owner == self.window
        if not self.owned:
            logger.error("Failed to acquire %s selection ownership", self.kind.value)

        # The ownership round trip may have queued requests inside Xlib
        self.process_pending_events()

    def process_pending_events(self) -> None:
        """Answer requests already queued on the display without blocking."""
        while self.display.pending_events() > 0:
            event = self.display.next_event()
            if event.type == X.SelectionRequest:
                handle_selection_request(self.display, event, self.text)
            elif event.type == X.SelectionClear:
                logger.debug("Lost %s selection ownership", self.kind.value)
                self.owned = False

    def close(self) -> None:
        self._loop.remove_reader(self._fd)
        self.window.destroy()
        self.display.close()
