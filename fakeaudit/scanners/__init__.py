"""Line and function scanners."""
