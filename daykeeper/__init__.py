"""
daykeeper - hour-by-hour task tracking with a wallpaper view of the day
"""
__version__ = "0.3.0"
