from sight_story.cli.compose import main

if __name__ == "__main__":
    main()
