"""
ICS Field Device Simulator
==========================

Three simulated industrial devices (climate control, pulse counter, tank
level) exposed as Modbus/TCP slaves on one server, one unit id each.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

__version__ = "1.0.0"
