import sys

from emissor_nfse.servidor import main


if __name__ == "__main__":
    sys.exit(main())
