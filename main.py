"""
Interactive software renderer.

    python main.py                           demo cube
    python main.py -m head.obj -t head.tga   textured model
    python main.py -o frame.bmp              one frame to a file, no window
"""

import sys

from softraster.app import main


if __name__ == "__main__":
    sys.exit(main())
