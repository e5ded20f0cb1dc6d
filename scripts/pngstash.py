#!/usr/bin/env python3
'''
 $ convert -size 5x5 xc:red red.png
 $ pngstash.py encode red.png ruSt 'hello'
 $ pngstash.py decode red.png ruSt
'''
import sys

from pngstash.cli import main


if __name__ == '__main__':
    sys.exit(main())
