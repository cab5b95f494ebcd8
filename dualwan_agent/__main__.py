from dualwan_agent.the_daemon import main

main()
