# UI: PySide6 window, panels, and Qt bridges for worker-thread events
