from codeblock_extractor.ui.cli import main


if __name__ == "__main__":
    main()
