"""Run TVGate with `python -m tvgate`."""

from tvgate.main import main

if __name__ == "__main__":
    main()
