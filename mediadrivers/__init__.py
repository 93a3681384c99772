"""Media capture driver registry, raw frame decoders, test devices and a VNC client."""

__version__ = "0.1.0"