"""Domain layer - governance entities, rules and the state codec.

This layer has no knowledge of storage, time sources or chat front-ends.
Everything it needs from outside (current time, token balances) is passed
in explicitly or reached through a port in chatdao.domain.ports.
"""
