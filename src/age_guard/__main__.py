"""Age guard 主入口"""

from age_guard.run import main


if __name__ == "__main__":
    main()
