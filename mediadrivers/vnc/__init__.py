"""A client for the RFB (VNC) remote framebuffer protocol."""