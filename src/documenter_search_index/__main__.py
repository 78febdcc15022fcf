from documenter_search_index.cli import main

main()
