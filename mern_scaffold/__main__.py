from mern_scaffold.cli import main

main()
