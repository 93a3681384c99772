"""Concrete capture devices: synthetic test sources and a VNC desktop."""